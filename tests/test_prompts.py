"""Tests for the interactive prompt helpers."""

from unittest.mock import patch

from vault_aws_login import prompts


class TestChoose:
    def test_empty_choices_do_not_prompt(self):
        with patch("click.prompt") as mock_prompt:
            assert prompts.choose("Choose an AWS account:", []) is None

        mock_prompt.assert_not_called()

    def test_returns_selected_entry(self, capsys):
        with patch("click.prompt", return_value=2) as mock_prompt:
            assert prompts.choose("Choose an IAM role:", ["admin", "developer", "viewer"]) == "developer"

        err = capsys.readouterr().err
        assert "Choose an IAM role:" in err
        assert "1) admin" in err
        assert "3) viewer" in err
        int_range = mock_prompt.call_args.kwargs["type"]
        assert (int_range.min, int_range.max) == (1, 3)


class TestAskCredentials:
    def test_defaults_passed_and_password_hidden(self):
        with patch("click.prompt", side_effect=["alice", "pw"]) as mock_prompt:
            assert prompts.ask_credentials("env-user", "env-pw") == ("alice", "pw")

        username_call, password_call = mock_prompt.call_args_list
        assert username_call.kwargs["default"] == "env-user"
        assert password_call.kwargs["default"] == "env-pw"
        assert password_call.kwargs["hide_input"] is True
        assert password_call.kwargs["show_default"] is False

    def test_no_defaults(self):
        with patch("click.prompt", side_effect=["alice", "pw"]) as mock_prompt:
            prompts.ask_credentials(None, None)

        assert all(call.kwargs["default"] is None for call in mock_prompt.call_args_list)
