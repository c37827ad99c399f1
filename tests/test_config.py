import os
import unittest
from unittest.mock import patch


class SettingsTests(unittest.TestCase):
    def test_defaults(self):
        from prbridge.config import Settings

        with patch.dict(os.environ, {}, clear=True):
            s = Settings(_env_file=None)

        self.assertEqual(s.fix_status_id, 3)
        self.assertEqual(s.close_status_id, 4)
        self.assertTrue(s.add_comment)
        self.assertTrue(s.update_status_on_merge)
        self.assertEqual(s.marker_target, "description")
        self.assertEqual(s.bot_login, "github-actions[bot]")

    def test_reads_environment(self):
        from prbridge.config import Settings

        env = {
            "BACKLOG_HOST": "ex.backlog.jp",
            "BACKLOG_API_KEY": "k",
            "GITHUB_TOKEN": "t",
            "FIX_STATUS_ID": "5",
            "CLOSE_STATUS_ID": "6",
            "ADD_COMMENT": "false",
            "MARKER_TARGET": "comments",
        }
        with patch.dict(os.environ, env, clear=True):
            s = Settings(_env_file=None)

        config = s.sync_config()
        self.assertEqual(config.backlog_host, "ex.backlog.jp")
        self.assertEqual((config.fix_status_id, config.close_status_id), (5, 6))
        self.assertFalse(s.add_comment)
        self.assertEqual(s.marker_target, "comments")

    def test_sync_config_names_missing_settings(self):
        from prbridge.config import Settings
        from prbridge.errors import ConfigurationError

        with patch.dict(os.environ, {}, clear=True):
            s = Settings(_env_file=None, backlog_host="ex.backlog.com")

        with self.assertRaises(ConfigurationError) as ctx:
            s.sync_config()

        self.assertIn("BACKLOG_API_KEY", str(ctx.exception))
        self.assertIn("GITHUB_TOKEN", str(ctx.exception))
        self.assertNotIn("BACKLOG_HOST", str(ctx.exception))

    def test_status_id_for_action(self):
        from prbridge.config import SyncConfig
        from prbridge.services.annotations import Action

        config = SyncConfig(backlog_host="h", fix_status_id=7, close_status_id=8)

        self.assertEqual(config.status_id_for(Action.FIX), 7)
        self.assertEqual(config.status_id_for(Action.CLOSE), 8)


if __name__ == "__main__":
    unittest.main()
