from huluhulu_ai.storage.style_store import StyleBatchStore, new_batch_id

__all__ = [
    "StyleBatchStore",
    "new_batch_id",
]
