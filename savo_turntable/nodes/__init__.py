#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable/nodes/__init__.py
---------------------------------------------
Package marker for ROS2 Python nodes in `savo_turntable`.

Node classes are not imported here: node modules import rclpy at module
level, and the rest of the package must stay importable without ROS.
"""
