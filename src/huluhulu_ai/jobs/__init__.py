# -*- coding: utf-8 -*-
"""
定时任务模块
"""
from huluhulu_ai.jobs.job_mgmt import Job, register_refresh_jobs

__all__ = [
    'Job',
    'register_refresh_jobs',
]
