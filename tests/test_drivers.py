"""Tests for the driver variants (core/drivers.py).

Real runs use the interpreter as the target binary; the runner and the
shell wrapper are mocked where only the delegation is under test.

Coverage:
* ``DirectDriver`` argument forms, options, error mapping, ``command``.
* ``LegacyDriver`` re-escaping, option pass-through, error mapping,
  ``command`` divergence.
* ``FakeDriver`` never spawns and concatenates ``command`` literally.
* Uniform error surface across variants: missing or non-executable
  binaries, unusable ``cwd``, a tool's own exit 127, unknown options.
* One driver instance used from several threads.
"""

from __future__ import annotations

import json
import shlex
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from mediakit.core.drivers import DirectDriver, FakeDriver, LegacyDriver
from mediakit.core.models import ExecutionResult
from mediakit.core.protocols import Driver
from mediakit.exceptions import (
    ArgumentEscapeError,
    ConfigurationError,
    DriverError,
    FailError,
    UnknownOptionError,
)
from mediakit.utils.shell_escape import escape

MISSING_BIN = "mediakit-no-such-binary-xyz"
ECHO_ARGV = "import sys, json; print(json.dumps(sys.argv[1:]))"


# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------

class TestContract:
    @pytest.mark.parametrize("driver_class", [DirectDriver, LegacyDriver, FakeDriver])
    def test_variants_satisfy_protocol(self, driver_class: type) -> None:
        driver = driver_class("ffmpeg")
        assert isinstance(driver, Driver)
        assert driver.bin == "ffmpeg"

    @pytest.mark.parametrize("driver_class", [DirectDriver, LegacyDriver, FakeDriver])
    def test_bin_is_read_only(self, driver_class: type) -> None:
        driver = driver_class("ffmpeg")
        with pytest.raises(AttributeError):
            driver.bin = "sox"

    @pytest.mark.parametrize("driver_class", [DirectDriver, LegacyDriver])
    def test_missing_binary_is_configuration_error(self, driver_class: type) -> None:
        with pytest.raises(ConfigurationError, match=MISSING_BIN):
            driver_class(MISSING_BIN).run("-version")

    @pytest.mark.parametrize("driver_class", [DirectDriver, LegacyDriver])
    def test_failure_is_fail_error(self, driver_class: type, python_bin: str) -> None:
        code = "import sys; sys.stderr.write('moov atom not found'); sys.exit(1)"
        with pytest.raises(FailError, match="moov atom not found") as exc_info:
            driver_class(python_bin).run(escape("-c", code))
        assert isinstance(exc_info.value, DriverError)

    @pytest.mark.parametrize("driver_class", [DirectDriver, LegacyDriver])
    def test_non_executable_binary_is_configuration_error(
        self, driver_class: type, tmp_path: Path,
    ) -> None:
        tool = tmp_path / "ffmpeg"
        tool.write_text("#!/bin/sh\necho hi\n")
        tool.chmod(0o644)
        with pytest.raises(ConfigurationError, match="can't find bin"):
            driver_class(str(tool)).run("-version")

    @pytest.mark.parametrize("driver_class", [DirectDriver, LegacyDriver])
    def test_tool_exit_127_is_fail_error(self, driver_class: type, python_bin: str) -> None:
        code = "import sys; sys.stderr.write('no such filter'); sys.exit(127)"
        with pytest.raises(FailError, match="no such filter"):
            driver_class(python_bin).run(escape("-c", code))

    @pytest.mark.parametrize("driver_class", [DirectDriver, LegacyDriver])
    @pytest.mark.parametrize("make_cwd", ["missing", "file"])
    def test_unusable_cwd_is_configuration_error(
        self, driver_class: type, make_cwd: str, python_bin: str, tmp_path: Path,
    ) -> None:
        cwd = tmp_path / "nope"
        if make_cwd == "file":
            cwd.write_text("")
        with pytest.raises(ConfigurationError, match="working directory") as exc_info:
            driver_class(python_bin).run(escape("-c", "pass"), cwd=cwd)
        assert str(cwd) in str(exc_info.value)
        assert "can't find bin" not in str(exc_info.value)
        assert exc_info.value.__cause__ is not None

    @pytest.mark.parametrize("driver_class", [DirectDriver, LegacyDriver])
    def test_unknown_option_is_driver_error(self, driver_class: type) -> None:
        with patch("mediakit.core.drivers.ProcessRunner") as runner_class, patch(
            "mediakit.core.drivers.CommandLine",
        ) as line_class:
            with pytest.raises(UnknownOptionError, match="chdir") as exc_info:
                driver_class("ffmpeg").run("-version", chdir="/tmp")
        assert isinstance(exc_info.value, ValueError)
        assert "cwd" in (exc_info.value.hint or "")
        runner_class.assert_not_called()
        line_class.assert_not_called()

    def test_legacy_rejects_input_option(self) -> None:
        with pytest.raises(UnknownOptionError, match="input"):
            LegacyDriver("ffmpeg").run("-version", input="x")

    def test_one_instance_across_threads(self, python_bin: str) -> None:
        driver = DirectDriver(python_bin)
        code = "import sys; print(sys.argv[1])"

        with ThreadPoolExecutor(max_workers=4) as pool:
            outputs = list(pool.map(lambda i: driver.run("-c", code, str(i)), range(8)))

        assert [out.strip() for out in outputs] == [str(i) for i in range(8)]
        assert driver.bin == python_bin


# ---------------------------------------------------------------------------
# DirectDriver
# ---------------------------------------------------------------------------

class TestDirectDriverRun:
    def test_positional_tokens(self, python_bin: str) -> None:
        out = DirectDriver(python_bin).run("-c", ECHO_ARGV, "in file.mp4", "$HOME")
        assert json.loads(out) == ["in file.mp4", "$HOME"]

    def test_token_sequence(self, python_bin: str) -> None:
        out = DirectDriver(python_bin).run(["-c", ECHO_ARGV, "a;b", ""])
        assert json.loads(out) == ["a;b", ""]

    def test_pre_formed_string(self, python_bin: str) -> None:
        out = DirectDriver(python_bin).run(escape("-c", ECHO_ARGV) + " -i 'in file.mp4'")
        assert json.loads(out) == ["-i", "in file.mp4"]

    def test_path_like_tokens(self, python_bin: str, tmp_path: Path) -> None:
        out = DirectDriver(python_bin).run("-c", ECHO_ARGV, tmp_path / "x y.wav")
        assert json.loads(out) == [str(tmp_path / "x y.wav")]

    def test_trailing_mapping_is_options(self, python_bin: str, tmp_path: Path) -> None:
        out = DirectDriver(python_bin).run(
            "-c", "import os; print(os.getcwd())", {"cwd": tmp_path},
        )
        assert Path(out.strip()).resolve() == tmp_path.resolve()

    def test_keyword_options_override_mapping(self, python_bin: str) -> None:
        code = "import os; print(os.environ['MEDIAKIT_MODE'])"
        out = DirectDriver(python_bin).run(
            "-c", code, {"env": {"MEDIAKIT_MODE": "mapping"}}, env={"MEDIAKIT_MODE": "kw"},
        )
        assert out.strip() == "kw"

    def test_fail_error_message_is_stderr_verbatim(self, python_bin: str) -> None:
        code = "import sys; sys.stderr.write('line 1\\nline 2\\n'); sys.exit(69)"
        with pytest.raises(FailError) as exc_info:
            DirectDriver(python_bin).run("-c", code)
        assert str(exc_info.value) == "line 1\nline 2\n"

    def test_timeout_is_fail_error(self, python_bin: str) -> None:
        with pytest.raises(FailError, match="timed out"):
            DirectDriver(python_bin).run("-c", "import time; time.sleep(30)", timeout=0.5)

    def test_configuration_error_names_binary(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            DirectDriver(MISSING_BIN).run()
        assert str(exc_info.value) == f"can't find bin in {MISSING_BIN}."
        assert exc_info.value.hint is not None

    def test_malformed_string_never_spawns(self) -> None:
        with patch("mediakit.core.drivers.ProcessRunner") as runner_class:
            with pytest.raises(ArgumentEscapeError):
                DirectDriver("ffmpeg").run("-i 'unterminated")
        runner_class.assert_not_called()

    @patch("mediakit.core.drivers.ProcessRunner")
    def test_delegates_escaped_args_and_options(self, runner_class: MagicMock) -> None:
        runner_class.return_value.run.return_value = ExecutionResult("probe", "", 0)

        out = DirectDriver("ffprobe").run("-i", "a b.mp4", timeout=5, cwd="/tmp")

        assert out == "probe"
        runner_class.assert_called_once_with(timeout=5, cwd="/tmp")
        runner_class.return_value.run.assert_called_once_with("ffprobe", "-i 'a b.mp4'")

    @patch("mediakit.core.drivers.ProcessRunner")
    def test_each_call_spawns_once(self, runner_class: MagicMock) -> None:
        runner_class.return_value.run.return_value = ExecutionResult("", "", 0)
        driver = DirectDriver("sox")
        driver.run("-h")
        driver.run("-h")
        assert runner_class.return_value.run.call_count == 2


class TestDirectDriverCommand:
    def test_escapes_each_token(self) -> None:
        command = DirectDriver("ffmpeg").command("-i", "in file.mp4", "-vf", "crop=1:1", "out.mp4")
        assert command == "ffmpeg -i 'in file.mp4' -vf crop=1:1 out.mp4"

    @pytest.mark.parametrize(
        "tokens",
        [
            ["-metadata", 'title="It\'s $5 & up"'],
            ["a|b", "c;d", "`e`", "f\ng", ""],
        ],
    )
    def test_shell_parsing_reconstructs_tokens(self, tokens: list[str]) -> None:
        command = DirectDriver("/opt/ff mpeg/bin/ffmpeg").command(tokens)
        assert shlex.split(command) == ["/opt/ff mpeg/bin/ffmpeg", *tokens]

    def test_no_args(self) -> None:
        assert DirectDriver("ffprobe").command() == "ffprobe"

    def test_pre_formed_string_is_requoted(self) -> None:
        assert DirectDriver("sox").command("-r 44100 'a b.wav'") == "sox -r 44100 'a b.wav'"

    @patch("mediakit.core.drivers.ProcessRunner")
    def test_command_does_not_execute(self, runner_class: MagicMock) -> None:
        DirectDriver("ffmpeg").command("-version")
        runner_class.assert_not_called()


# ---------------------------------------------------------------------------
# LegacyDriver
# ---------------------------------------------------------------------------

class TestLegacyDriverRun:
    def test_runs_through_shell(self, python_bin: str) -> None:
        assert LegacyDriver(python_bin).run(escape("-c", "print('hi')")) == "hi\n"

    def test_whole_string_is_reescaped(self, python_bin: str) -> None:
        out = LegacyDriver(python_bin).run(escape("-c", ECHO_ARGV) + " $HOME ; echo pwned")
        assert json.loads(out) == ["$HOME", ";", "echo", "pwned"]

    def test_token_sequence(self, python_bin: str) -> None:
        out = LegacyDriver(python_bin).run(["-c", ECHO_ARGV, "in file.mp4"])
        assert json.loads(out) == ["in file.mp4"]

    def test_fail_error_carries_wrapper_message(self, python_bin: str) -> None:
        code = "import sys; sys.stderr.write('Unknown encoder'); sys.exit(4)"
        with pytest.raises(FailError) as exc_info:
            LegacyDriver(python_bin).run(escape("-c", code))
        message = str(exc_info.value)
        assert "returned 4" in message
        assert message.endswith("Unknown encoder")

    def test_malformed_string_is_driver_error(self) -> None:
        with pytest.raises(ArgumentEscapeError):
            LegacyDriver("ffmpeg").run('-i "unterminated')

    @patch("mediakit.core.drivers.CommandLine")
    def test_options_pass_through(self, line_class: MagicMock) -> None:
        line_class.return_value.run.return_value = "out"

        assert LegacyDriver("ffmpeg").run("-i  'a b.mp4'", timeout=3) == "out"
        line_class.assert_called_once_with(
            "ffmpeg", "-i 'a b.mp4'", swallow_stderr=True, timeout=3,
        )


class TestLegacyDriverCommand:
    def test_no_extra_escaping(self) -> None:
        assert LegacyDriver("ffmpeg").command("-i in.mp4 $OUT") == "ffmpeg -i in.mp4 $OUT"

    def test_default_args(self) -> None:
        assert LegacyDriver("ffmpeg").command() == "ffmpeg"

    def test_differs_from_direct_driver(self) -> None:
        raw = "-i a.mp4 $OUT"
        assert LegacyDriver("ffmpeg").command(raw) != DirectDriver("ffmpeg").command(raw)


# ---------------------------------------------------------------------------
# FakeDriver
# ---------------------------------------------------------------------------

class TestFakeDriver:
    @patch("subprocess.Popen")
    def test_run_never_spawns(self, popen: MagicMock) -> None:
        driver = FakeDriver(MISSING_BIN)
        assert driver.run("-i", "in.mp4", timeout=1) is True
        assert driver.run() is True
        assert driver.run("-i 'unterminated") is True
        popen.assert_not_called()

    def test_command_concatenates_without_separator(self) -> None:
        driver = FakeDriver("/usr/local/bin/sox")
        assert driver.command(["-r", "44100"]) == "/usr/local/bin/sox-r 44100"
        assert driver.command("-r 44100") == "/usr/local/bin/sox-r 44100"

    def test_command_does_not_escape(self) -> None:
        assert FakeDriver("ffmpeg").command(" -i 'a b'.mp4") == "ffmpeg -i 'a b'.mp4"

    def test_command_default(self) -> None:
        assert FakeDriver("ffmpeg").command() == "ffmpeg"
