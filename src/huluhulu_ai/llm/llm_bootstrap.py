# llm_bootstrap.py
import litellm


def init_litellm():
    litellm.modify_params = True
    litellm.drop_params = True
