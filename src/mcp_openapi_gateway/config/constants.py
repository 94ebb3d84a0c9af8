#!/usr/bin/env python3
"""
Configuration detection constants - container indicators and
boolean environment values.
"""

# ---------------------------------------------------------------------------
# Container detection
# ---------------------------------------------------------------------------
DOCKERENV_PATH = "/.dockerenv"
CGROUP_PATH = "/proc/1/cgroup"

CONTAINER_INDICATORS = ("docker", "containerd", "lxc", "kubepods")

ENV_KUBERNETES_HOST = "KUBERNETES_SERVICE_HOST"
ENV_CONTAINER = "CONTAINER"


# ---------------------------------------------------------------------------
# Boolean parsing
# ---------------------------------------------------------------------------
TRUTHY_VALUES = frozenset({"1", "true", "yes", "on"})


# ---------------------------------------------------------------------------
# Port bounds
# ---------------------------------------------------------------------------
PORT_MIN = 1
PORT_MAX = 65535
