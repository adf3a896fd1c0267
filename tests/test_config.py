"""
Unit tests for stack configuration
"""

import unittest
from unittest.mock import Mock
import sys
import os

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from chart_watch.config import Config


def stack_config(**values):
    """pulumi.Config double backed by a dict"""
    config = Mock()
    config.get.side_effect = values.get
    config.get_bool.side_effect = values.get
    config.get_object.side_effect = values.get
    return config


class TestConfig(unittest.TestCase):
    """Test configuration defaults and overrides"""

    def test_defaults(self):
        config = Config(stack_config())

        self.assertTrue(config.chart_version_check)
        self.assertEqual(config.chart_index_order, "published")
        self.assertIsNone(config.kube_context)
        self.assertEqual(config.charts, [])
        self.assertEqual(config.common_labels["managed-by"], "pulumi")

    def test_overrides(self):
        charts = [{"name": "loki", "chart": "loki", "version": "4.6"}]
        config = Config(stack_config(
            chart_version_check=False,
            chart_index_order="semver",
            kube_context="rpi4",
            charts=charts,
            tags={"team": "platform", "managed-by": "ci"},
        ))

        self.assertFalse(config.chart_version_check)
        self.assertEqual(config.chart_index_order, "semver")
        self.assertEqual(config.kube_context, "rpi4")
        self.assertEqual(config.charts, charts)
        self.assertEqual(config.common_labels["team"], "platform")
        self.assertEqual(config.common_labels["managed-by"], "ci")

    def test_invalid_index_order(self):
        with self.assertRaises(ValueError):
            Config(stack_config(chart_index_order="alphabetical"))


if __name__ == "__main__":
    unittest.main()
