# SPDX-License-Identifier: MIT
"""Configuration: layered settings, host platform and SDK detection."""
