"""
Tests for appcastkit.cli module.

Runs the command handlers through main() with argument lists and checks
exit codes, console output and written files.
"""

from __future__ import annotations

import pytest

from appcastkit.cli import build_parser, main

BASE_URL = "https://example.com/downloads"


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


@pytest.fixture
def dist(create_file, tmp_test_dir):
    create_file("dist/hello 1.0.txt")
    create_file("dist/hello 1.1.txt")
    return tmp_test_dir / "dist"


@pytest.mark.unit
class TestParser:
    """Tests for argument parsing."""

    def test_version(self, capsys):
        """Test --version prints the program name."""
        assert _run(["--version"]) == 0
        assert "appcastkit" in capsys.readouterr().out

    def test_command_required(self, capsys):
        """Test that a subcommand is required."""
        assert _run([]) == 2

    def test_unset_flags_are_none(self):
        """Test that generate flags default to None so config values win."""
        args = build_parser().parse_args(["generate"])
        assert args.search_subdirectories is None
        assert args.human_readable is None
        assert args.channel is None

    def test_compact_flag(self):
        """Test that --compact turns off human readable output."""
        args = build_parser().parse_args(["generate", "--compact"])
        assert args.human_readable is False


@pytest.mark.integration
class TestGenerateCommand:
    """Tests for 'appcastkit generate'."""

    def test_generate_signed(self, dist, signer, capsys):
        """Test a signed appcast generated from flags."""
        code = _run(
            [
                "generate",
                "-s", str(dist),
                "-e", "txt",
                "--file-extract-version",
                "-u", BASE_URL,
                "--key-directory", str(signer.key_directory),
                "--channel", "beta",
                "--critical-versions", "1.0",
            ]
        )

        out = capsys.readouterr().out
        assert code == 0
        assert "[SUCCESS] Appcast generated successfully!" in out
        assert "Items:           2" in out
        assert "critical" in out
        assert (dist / "appcast.xml").is_file()
        signature = (dist / "appcast.xml.signature").read_text(encoding="utf-8")
        assert signer.verify_file(dist / "appcast.xml", signature)

    def test_generate_from_config(self, dist, create_yaml_file, signer, capsys):
        """Test options from a config file with a flag override."""
        config = create_yaml_file(
            "appcast.yaml",
            {
                "source_directory": "dist",
                "extensions": ["txt"],
                "file_extract_version": True,
                "base_url": BASE_URL,
                "appcast_format": "json",
                "channel": "stable",
                "key_directory": str(signer.key_directory),
            },
        )

        code = _run(["generate", "--config", str(config), "--channel", "beta"])

        assert code == 0
        text = (dist / "appcast.json").read_text(encoding="utf-8")
        assert '"channel": "beta"' in text
        assert '"channel": "stable"' not in text

    def test_unsigned_warning(self, dist, tmp_test_dir, capsys):
        """Test that a missing key directory yields a warning, not an error."""
        code = _run(
            [
                "generate",
                "-s", str(dist),
                "-e", "txt",
                "--file-extract-version",
                "--key-directory", str(tmp_test_dir / "no-keys"),
            ]
        )
        out = capsys.readouterr().out
        assert code == 0
        assert "[WARNING]" in out
        assert "(not signed)" in out

    def test_no_binaries_error(self, tmp_test_dir, capsys):
        """Test that build errors exit with 1."""
        (tmp_test_dir / "empty").mkdir()
        code = _run(["generate", "-s", str(tmp_test_dir / "empty"), "-e", "exe"])
        out = capsys.readouterr().out
        assert code == 1
        assert "Error: No files found" in out

    def test_invalid_options(self, dist, capsys):
        """Test that invalid options are listed and exit with 1."""
        code = _run(["generate", "-s", str(dist), "--os", "beos"])
        out = capsys.readouterr().out
        assert code == 1
        assert "[X] Invalid operating system 'beos'" in out

    def test_config_error(self, tmp_test_dir, capsys):
        """Test that a missing config file exits with 1."""
        code = _run(["generate", "--config", str(tmp_test_dir / "missing.yaml")])
        assert code == 1
        assert "Error: Config file not found" in capsys.readouterr().out


@pytest.mark.integration
class TestKeysAndVerify:
    """Tests for 'appcastkit generate-keys' and 'appcastkit verify'."""

    def test_generate_keys(self, tmp_test_dir, capsys):
        """Test key creation and the no-overwrite warning."""
        keys = tmp_test_dir / "keys"
        assert _run(["generate-keys", "--key-directory", str(keys)]) == 0
        out = capsys.readouterr().out
        assert "[SUCCESS] Keys written" in out
        assert "Public key:" in out
        assert (keys / "appcast_ed25519.priv").is_file()

        assert _run(["generate-keys", "--key-directory", str(keys)]) == 0
        assert "[WARNING] Keys already exist" in capsys.readouterr().out

    def test_verify_side_file(self, dist, signer, capsys):
        """Test verifying the appcast against its side-file."""
        keys = str(signer.key_directory)
        _run(["generate", "-s", str(dist), "-e", "txt", "--file-extract-version",
              "--key-directory", keys])
        appcast = dist / "appcast.xml"

        assert _run(["verify", str(appcast), "--key-directory", keys]) == 0
        assert "[SUCCESS] Signature is valid" in capsys.readouterr().out

        appcast.write_text(appcast.read_text(encoding="utf-8") + " ", encoding="utf-8")
        assert _run(["verify", str(appcast), "--key-directory", keys]) == 1
        assert "[X] Signature is NOT valid" in capsys.readouterr().out

    def test_verify_explicit_signature(self, create_file, signer):
        """Test verifying with a signature given on the command line."""
        target = create_file("file.bin", "payload")
        sig = signer.sign_file(target)
        keys = str(signer.key_directory)
        assert _run(["verify", str(target), "--signature", sig, "--key-directory", keys]) == 0
        assert _run(["verify", str(target), "--signature", "Zm9v", "--key-directory", keys]) == 1

    def test_verify_missing_signature_file(self, create_file, signer, capsys):
        """Test a missing side-file."""
        target = create_file("file.bin", "payload")
        code = _run(["verify", str(target), "--key-directory", str(signer.key_directory)])
        assert code == 1
        assert "Signature file not found" in capsys.readouterr().out

    def test_verify_missing_file(self, tmp_test_dir, capsys):
        """Test a missing target file."""
        assert _run(["verify", str(tmp_test_dir / "nope.xml")]) == 1
        assert "File not found" in capsys.readouterr().out
