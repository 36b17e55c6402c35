#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable / nodes / turntable_control_node.py (ROS2 Jazzy)
============================================================================

Purpose
-------
ROS2 wiring around the turntable `RotationScheduler`: the scheduler is ticked
from a wall timer, the angle comes from a topic and the lever goes out on
another.

Topics (defaults)
-----------------
in   /turntable/angle_deg   std_msgs/Float32  current heading (deg)
in   /turntable/command     std_msgs/String   index:<n> | next:+1 | next:-1 |
                                              flip | cancel | lever:<v> | center
out  /turntable/lever       std_msgs/Float32  normalized lever [0, 1], 0.5 neutral
out  /turntable/status      std_msgs/String   JSON telemetry + last request result

Safety-first defaults
---------------------
- Requests are rejected (`actuator_read_failed`) until a finite angle arrives
- A stale angle skips control ticks (the lever keeps its last value, as on cancel)
- Shutdown publishes a neutral lever

Notes
-----
- Parameters are typically passed with `--params-file config/turntable_control.yaml`.
- All control behavior lives in `savo_turntable.control`; this file is wiring only.
"""

from __future__ import annotations

import json
import math
from typing import Optional

import rclpy
from rclpy.node import Node
from std_msgs.msg import Float32, String

from savo_turntable.constants import (
    CONVERGENCE_THRESHOLD_DEG_DEFAULT,
    DT_EPSILON_S_DEFAULT,
    KD_DEFAULT,
    KI_DEFAULT,
    KP_DEFAULT,
    LEVER_NEUTRAL_DEFAULT,
    MAX_TASK_DURATION_S_DEFAULT,
    NEUTRAL_ON_CANCEL_DEFAULT,
    NODE_NAME_TURNTABLE_CONTROL,
    OUTPUT_MAX_DEFAULT,
    OUTPUT_MIN_DEFAULT,
    STATUS_PUBLISH_HZ_DEFAULT,
    TICK_HZ_DEFAULT,
    TOPIC_TURNTABLE_ANGLE,
    TOPIC_TURNTABLE_COMMAND,
    TOPIC_TURNTABLE_LEVER,
    TOPIC_TURNTABLE_STATUS,
)
from savo_turntable.control import RotationScheduler, apply_command, parse_command
from savo_turntable.drivers import TurntableException
from savo_turntable.models import PidGains, RequestResult, TurntableControlConfig
from savo_turntable.utils.logging import get_logger_adapter, log_exception
from savo_turntable.version import get_package_version_info


# =============================================================================
# Topic-backed actuator
# =============================================================================
class TopicTurntable:
    """
    `TurntableActuator` whose angle is the latest message on the angle topic
    and whose lever writes are published straight away.
    """

    def __init__(self, node: Node, *, name: str, subdivisions: int, lever_topic: str) -> None:
        self.name = name
        self._node = node
        self._subdivisions = subdivisions
        self._angle_deg = math.nan
        self._angle_stamp_sec: Optional[float] = None
        self._lever = LEVER_NEUTRAL_DEFAULT
        self._pub_lever = node.create_publisher(Float32, lever_topic, 10)

    # TurntableActuator -----------------------------------------------------
    def get_angle(self) -> float:
        return self._angle_deg

    def get_subdivisions(self) -> int:
        return self._subdivisions

    def get_lever(self) -> float:
        return self._lever

    def set_lever(self, value: float) -> None:
        self._lever = float(value)
        msg = Float32()
        msg.data = self._lever
        self._pub_lever.publish(msg)

    # Node side ---------------------------------------------------------------
    def update_angle(self, angle_deg: float, stamp_sec: float) -> None:
        self._angle_deg = float(angle_deg)
        self._angle_stamp_sec = stamp_sec

    def invalidate_angle(self) -> None:
        self._angle_deg = math.nan

    def angle_age_sec(self, now_sec: float) -> Optional[float]:
        if self._angle_stamp_sec is None:
            return None
        return now_sec - self._angle_stamp_sec


# =============================================================================
# Node
# =============================================================================
class TurntableControlNode(Node):
    def __init__(self) -> None:
        super().__init__(NODE_NAME_TURNTABLE_CONTROL)

        # ---------------------------------------------------------------------
        # Parameters (topics / runtime)
        # ---------------------------------------------------------------------
        self.declare_parameter("turntable_name", "turntable")
        self.declare_parameter("subdivisions", 4)

        self.declare_parameter("angle_topic", TOPIC_TURNTABLE_ANGLE)
        self.declare_parameter("command_topic", TOPIC_TURNTABLE_COMMAND)
        self.declare_parameter("lever_topic", TOPIC_TURNTABLE_LEVER)
        self.declare_parameter("status_topic", TOPIC_TURNTABLE_STATUS)

        self.declare_parameter("tick_hz", TICK_HZ_DEFAULT)
        self.declare_parameter("status_publish_hz", STATUS_PUBLISH_HZ_DEFAULT)
        self.declare_parameter("angle_stale_timeout_s", 0.5)

        # ---------------------------------------------------------------------
        # Parameters (rotation control)
        # ---------------------------------------------------------------------
        self.declare_parameter("pid.kp", KP_DEFAULT)
        self.declare_parameter("pid.ki", KI_DEFAULT)
        self.declare_parameter("pid.kd", KD_DEFAULT)
        self.declare_parameter("convergence_threshold_deg", CONVERGENCE_THRESHOLD_DEG_DEFAULT)
        self.declare_parameter("neutral_lever", LEVER_NEUTRAL_DEFAULT)
        self.declare_parameter("output_min", OUTPUT_MIN_DEFAULT)
        self.declare_parameter("output_max", OUTPUT_MAX_DEFAULT)
        self.declare_parameter("dt_epsilon_s", DT_EPSILON_S_DEFAULT)
        self.declare_parameter("neutral_on_cancel", NEUTRAL_ON_CANCEL_DEFAULT)
        self.declare_parameter("max_task_duration_s", MAX_TASK_DURATION_S_DEFAULT)

        # ---------------------------------------------------------------------
        # Internal state
        # ---------------------------------------------------------------------
        self._log = get_logger_adapter(self)
        self._last_tick_sec: Optional[float] = None
        self._last_result: Optional[RequestResult] = None
        self._last_command: str = ""

        # ---------------------------------------------------------------------
        # Actuator + scheduler
        # ---------------------------------------------------------------------
        name = self._param_str("turntable_name")
        self._table = TopicTurntable(
            self,
            name=name,
            subdivisions=self.get_parameter("subdivisions").get_parameter_value().integer_value,
            lever_topic=self._param_str("lever_topic"),
        )
        self._scheduler = RotationScheduler(
            self._table,
            self._config_from_params(),
            name=name,
            logger=self._log,
        )

        # ---------------------------------------------------------------------
        # ROS interfaces
        # ---------------------------------------------------------------------
        self.sub_angle = self.create_subscription(Float32, self._param_str("angle_topic"), self._on_angle, 10)
        self.sub_command = self.create_subscription(String, self._param_str("command_topic"), self._on_command, 10)
        self.pub_status = self.create_publisher(String, self._param_str("status_topic"), 10)

        # Timers
        tick_hz = self._param_float("tick_hz")
        if (not math.isfinite(tick_hz)) or tick_hz <= 0.0:
            tick_hz = TICK_HZ_DEFAULT
        self._timer = self.create_timer(1.0 / tick_hz, self._on_timer)

        self._status_timer = None
        status_hz = self._param_float("status_publish_hz")
        if math.isfinite(status_hz) and status_hz > 0.0:
            self._status_timer = self.create_timer(1.0 / status_hz, self._publish_status)

        self.get_logger().info(
            f"{get_package_version_info().banner()} | turntable_control_node started | table={name} "
            f"angle_topic={self._param_str('angle_topic')} lever_topic={self._param_str('lever_topic')} "
            f"tick={tick_hz:.1f}Hz config={json.dumps(self._scheduler.config.to_dict())}"
        )

    # =========================================================================
    # Parameter handling
    # =========================================================================
    def _param_str(self, name: str) -> str:
        return self.get_parameter(name).get_parameter_value().string_value

    def _param_float(self, name: str) -> float:
        return self.get_parameter(name).get_parameter_value().double_value

    def _param_bool(self, name: str) -> bool:
        return self.get_parameter(name).get_parameter_value().bool_value

    def _config_from_params(self) -> TurntableControlConfig:
        return TurntableControlConfig(
            gains=PidGains(
                kp=self._param_float("pid.kp"),
                ki=self._param_float("pid.ki"),
                kd=self._param_float("pid.kd"),
            ),
            convergence_threshold_deg=self._param_float("convergence_threshold_deg"),
            neutral_lever=self._param_float("neutral_lever"),
            output_min=self._param_float("output_min"),
            output_max=self._param_float("output_max"),
            dt_epsilon_s=self._param_float("dt_epsilon_s"),
            neutral_on_cancel=self._param_bool("neutral_on_cancel"),
            max_task_duration_s=self._param_float("max_task_duration_s"),
        )

    def _now_sec(self) -> float:
        return self.get_clock().now().nanoseconds * 1e-9

    # =========================================================================
    # Subscribers
    # =========================================================================
    def _on_angle(self, msg: Float32) -> None:
        if msg is None:
            return
        self._table.update_angle(float(msg.data), self._now_sec())

    def _on_command(self, msg: String) -> None:
        if msg is None:
            return
        text = str(msg.data)
        self._last_command = text
        try:
            command = parse_command(text)
        except TurntableException as e:
            log_exception(self._log, e, message=f"ignored command {text!r}", component="turntable_control_node")
            return

        outcome = apply_command(self._scheduler, command)
        if isinstance(outcome, RequestResult):
            self._last_result = outcome
        self._publish_status()

    # =========================================================================
    # Main control loop
    # =========================================================================
    def _on_timer(self) -> None:
        now_sec = self._now_sec()
        if self._last_tick_sec is None:
            self._last_tick_sec = now_sec
            return

        dt_sec = now_sec - self._last_tick_sec
        self._last_tick_sec = now_sec

        # Stale readout: drop it so the scheduler skips this tick
        age = self._table.angle_age_sec(now_sec)
        stale_timeout = self._param_float("angle_stale_timeout_s")
        if age is not None and math.isfinite(stale_timeout) and stale_timeout > 0.0 and age > stale_timeout:
            self._table.invalidate_angle()

        self._scheduler.tick(dt_sec)

    # =========================================================================
    # Publishers
    # =========================================================================
    def _publish_status(self) -> None:
        payload = {
            "node": NODE_NAME_TURNTABLE_CONTROL,
            "package": get_package_version_info().to_dict(),
            "active": self._scheduler.is_active(),
            "last_command": self._last_command,
            "last_result": self._last_result.to_dict() if self._last_result is not None else None,
        }
        try:
            telemetry = self._scheduler.telemetry()
        except TurntableException as e:
            payload["telemetry"] = None
            payload["error"] = e.to_dict()
        else:
            payload["telemetry"] = telemetry.to_dict() if telemetry is not None else None

        msg = String()
        msg.data = json.dumps(_nan_to_none(payload), separators=(",", ":"), default=str)
        self.pub_status.publish(msg)

    def publish_neutral(self) -> None:
        # Cancels any running task first
        self._scheduler.center_lever()


# =============================================================================
# JSON helpers (JSON has no NaN)
# =============================================================================
def _nan_to_none(value):
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: _nan_to_none(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_nan_to_none(v) for v in value]
    return value


def main(args=None) -> None:
    rclpy.init(args=args)
    node = TurntableControlNode()
    try:
        rclpy.spin(node)
    except KeyboardInterrupt:
        pass
    finally:
        # Safe stop on exit
        node.publish_neutral()
        node.destroy_node()
        rclpy.shutdown()


if __name__ == "__main__":
    main()
