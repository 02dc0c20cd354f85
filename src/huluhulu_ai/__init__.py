#! /usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Huluhulu AI - 热点风格修图服务
"""
__version__ = "0.1.0"
