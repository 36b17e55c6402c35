#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — setup.py (ROS 2 Jazzy, ament_python)
-------------------------------------------------
Purpose:
- Package the Python modules under `savo_turntable/`
- Install the ROS2 node and the sim CLI as console scripts
- Install package.xml, the ament index marker and config/

Consistency requirements
------------------------
Keep these names exactly aligned:
  package.xml   -> <name>savo_turntable</name>
  setup.py      -> package_name = "savo_turntable"
  folder        -> savo_turntable/
  resource/     -> resource/savo_turntable
"""

from glob import glob

from setuptools import find_packages, setup

package_name = "savo_turntable"

setup(
    name=package_name,
    version="0.1.0",
    packages=find_packages(exclude=("test", "test.*")),
    include_package_data=True,
    data_files=[
        # ament index resource (required for ROS 2 package discovery)
        ("share/ament_index/resource_index/packages", [f"resource/{package_name}"]),
        # package manifest
        (f"share/{package_name}", ["package.xml"]),
        # params files
        (f"share/{package_name}/config", glob("config/*.yaml")),
    ],
    install_requires=[
        "setuptools",
        "PyYAML",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.10",
    zip_safe=False,
    maintainer="Ahnaf Tahmid",
    maintainer_email="tahmidahnaf998@gmail.com",
    description=(
        "Robot SAVO closed-loop turntable rotation control "
        "(PID on wrapped heading error, stop-index / neighbor / flip requests, "
        "single-writer lever ownership, simulated turntable) for ROS 2 Jazzy."
    ),
    license="Proprietary",
    tests_require=["pytest"],
    entry_points={
        "console_scripts": [
            # Needs a sourced ROS 2 environment (rclpy, std_msgs)
            "turntable_control_node = savo_turntable.nodes.turntable_control_node:main",
            # Pure Python, no ROS required
            "turntable_sim_cli = savo_turntable.scripts.turntable_sim_cli:main",
        ],
    },
)
