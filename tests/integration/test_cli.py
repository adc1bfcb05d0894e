"""
Integration tests for the dicebag command-line interface.
"""

import json

import pytest

from dicebag.cli.commands import main


@pytest.fixture(autouse=True)
def cli_environment(restore_root_logger, fresh_config, monkeypatch):
    for name in ('BREAKDOWN_STYLE', 'DICE_SEED', 'MAX_DICE', 'LOG_FILE', 'LOG_LEVEL'):
        monkeypatch.delenv(name, raising=False)


class TestRollCommand:
    """Test `dicebag roll`."""

    def test_arithmetic(self, capsys):
        """Test an expression without dice prints only the result."""
        main(['roll', '2', '+', '3', '*', '4'])
        assert capsys.readouterr().out.strip() == "Result: 14"

    def test_single_die_shows_only_roll(self, capsys):
        """Test a single die hides the redundant total."""
        main(['--seed', '1', '--style', 'plain', 'roll', 'd20'])
        out = capsys.readouterr().out.strip()
        assert out.startswith("1d20: [")
        assert "Result:" not in out

    def test_inline_with_annotation(self, capsys):
        """Test a short roll prints inline behind its reason."""
        main(['--seed', '1', '--style', 'plain', 'roll', '2d20b', '+', '5', '!', 'attack'])
        out = capsys.readouterr().out.strip()
        assert out.startswith("attack: 2d20b1: [")
        assert "Result:" in out

    def test_detailed_view(self, capsys):
        """Test a roll of many dice prints one field per line."""
        main(['--seed', '2', '--style', 'plain', 'roll', '6d6', '!', 'stats'])
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "Reason:  stats"
        assert lines[1] == "Command: 6d6"
        assert lines[2].startswith("Rolls:   6d6: [")
        assert lines[3].startswith("Result:  ")

    def test_json_output(self, capsys):
        """Test --json prints the roll as JSON."""
        main(['--json', '--seed', '4', 'roll', '4d6b3'])
        data = json.loads(capsys.readouterr().out)
        assert 3 <= data['total'] <= 18
        assert data['rolls'][0]['keep'] == {'mode': 'best', 'amount': 3}

    def test_same_seed_same_output(self, capsys):
        """Test --seed makes a roll repeatable."""
        main(['--seed', '9', 'roll', '3d20b2', '+', '11'])
        first = capsys.readouterr().out
        main(['--seed', '9', 'roll', '3d20b2', '+', '11'])
        assert capsys.readouterr().out == first

    def test_error_exits_nonzero(self, capsys):
        """Test a rejected command exits 1 with its error code."""
        with pytest.raises(SystemExit) as exc_info:
            main(['roll', '5', '/', '0'])
        assert exc_info.value.code == 1
        assert "division_by_zero" in capsys.readouterr().err

    def test_huge_dice_size(self, capsys):
        """Test a die too large to total is reported, not raised."""
        with pytest.raises(SystemExit) as exc_info:
            main(['roll', 'd' + '9' * 400])
        assert exc_info.value.code == 1
        assert "malformed_dice_spec" in capsys.readouterr().err


class TestConfiguration:
    """Test startup with bad settings."""

    @pytest.mark.parametrize("name,value", [
        ('BREAKDOWN_STYLE', 'fancy'),
        ('MAX_DICE', 'lots'),
        ('MAX_DICE', '0'),
        ('LOG_LEVEL', 'bogus'),
    ])
    def test_bad_setting_exits_cleanly(self, monkeypatch, capsys, name, value):
        """Test a bad environment setting exits 1 naming the setting."""
        monkeypatch.setenv(name, value)
        with pytest.raises(SystemExit) as exc_info:
            main(['roll', '2', '+', '2'])
        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert "invalid_config" in captured.err
        assert name in captured.err
        assert captured.out == ""

    def test_every_bad_setting_reported(self, monkeypatch, capsys):
        """Test each bad setting gets its own error line."""
        monkeypatch.setenv('BREAKDOWN_STYLE', 'fancy')
        monkeypatch.setenv('LOG_LEVEL', 'bogus')
        with pytest.raises(SystemExit):
            main(['roll', 'd6'])
        err_lines = [line for line in capsys.readouterr().err.splitlines() if "invalid_config" in line]
        assert len(err_lines) == 2

    def test_bad_log_level_flag(self, capsys):
        """Test an unknown --log-level is a usage error."""
        with pytest.raises(SystemExit) as exc_info:
            main(['--log-level', 'bogus', 'roll', 'd6'])
        assert exc_info.value.code == 2
        assert "--log-level" in capsys.readouterr().err

    def test_log_level_flag_case_insensitive(self, capsys):
        """Test --log-level accepts lowercase names."""
        main(['--log-level', 'debug', 'roll', '1', '+', '1'])
        assert capsys.readouterr().out.strip() == "Result: 2"


class TestOtherCommands:
    """Test batch, rpn and jail."""

    def test_batch(self, capsys):
        """Test a batch lists each total under its reason."""
        main(['--seed', '3', 'batch', '3', 'd6', '!', 'initiative'])
        out = capsys.readouterr().out
        assert "Count:   3" in out
        assert "Reason:  initiative" in out
        assert "3: " in out

    def test_batch_json(self, capsys):
        """Test --json prints the batch as JSON."""
        main(['--json', '--seed', '3', 'batch', '4', 'd6'])
        data = json.loads(capsys.readouterr().out)
        assert data['count'] == 4
        assert all(1 <= total <= 6 for total in data['totals'])

    def test_batch_count_too_small(self, capsys):
        """Test a batch of one is rejected."""
        with pytest.raises(SystemExit):
            main(['batch', '1', 'd6'])
        assert "invalid_batch_count" in capsys.readouterr().err

    def test_rpn(self, capsys):
        """Test the postfix form is printed space-separated."""
        main(['rpn', '(2', '+', '3)', '*', '4'])
        assert capsys.readouterr().out.strip() == "2 3 + 4 *"

    def test_jail(self, capsys):
        """Test new dice are announced with a sample roll."""
        main(['jail'])
        out = capsys.readouterr().out
        assert "dice jail" in out
        assert "Sample rolls: 5d20: [" in out

    def test_no_command(self, capsys):
        """Test running without a command prints help and exits 1."""
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 1
