import os
import random
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

from pydantic import ValidationError

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from inference_sim.config import Settings
from inference_sim.simulator import FailureKind, FailureSelector, InjectionConfig


class SettingsTests(unittest.TestCase):
    def test_defaults_disable_injection(self):
        settings = Settings(_env_file=None)
        self.assertEqual(settings.failure_injection_rate, 0)
        self.assertEqual(settings.failure_types, [])
        self.assertEqual(settings.injection_config(), InjectionConfig())

    def test_reads_prefixed_environment(self):
        env = {
            "SIM_MODEL": "my-model",
            "SIM_FAILURE_INJECTION_RATE": "25",
            "SIM_FAILURE_TYPES": "rate_limit, server_error",
        }
        with patch.dict(os.environ, env):
            settings = Settings(_env_file=None)

        self.assertEqual(settings.failure_types, ["rate_limit", "server_error"])
        config = settings.injection_config()
        self.assertEqual(config.injection_rate, 25)
        self.assertEqual(config.allowed_kinds, ("rate_limit", "server_error"))
        self.assertEqual(config.model_name, "my-model")

    def test_accepts_json_list(self):
        with patch.dict(os.environ, {"SIM_FAILURE_TYPES": '["context_length"]'}):
            settings = Settings(_env_file=None)
        self.assertEqual(settings.failure_types, ["context_length"])

    def test_blank_env_list_means_all_kinds(self):
        with patch.dict(os.environ, {"SIM_FAILURE_TYPES": " , "}):
            settings = Settings(_env_file=None)

        config = settings.injection_config()
        self.assertEqual(config.allowed_kinds, ())
        selector = FailureSelector(rng=random.Random(8))
        codes = {selector.select_failure(config).error_code for _ in range(300)}
        self.assertEqual(len(codes), len(FailureKind))

    def test_rejects_rate_above_hundred(self):
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, failure_injection_rate=101)

    def test_rejects_unknown_failure_type(self):
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, failure_types=["rate_limit", "teapot"])


if __name__ == "__main__":
    unittest.main()
