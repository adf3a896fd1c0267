"""
Unit tests for the stack program layout
"""

import unittest
import os

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class TestProgram(unittest.TestCase):
    """Test that the stack program declares charts through chart_watch"""

    def setUp(self):
        with open(os.path.join(PROJECT_ROOT, "__main__.py"), "r") as f:
            self.main_content = f.read()

    def test_charts_declared_through_declare_chart(self):
        self.assertIn("declare_chart(", self.main_content)
        self.assertIn("ChartRequest.from_config(", self.main_content)
        self.assertNotIn("helm.v3.Chart(", self.main_content)

    def test_releases_exported(self):
        self.assertIn('pulumi.export("releases"', self.main_content)


if __name__ == "__main__":
    unittest.main()
