#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable/scripts/__init__.py
-----------------------------------------------
Package marker for command-line tools in `savo_turntable`.
"""
