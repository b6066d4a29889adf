# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Command-line interface for appcastkit.

Commands:

    generate: Build or update an appcast from a directory of binaries
    generate-keys: Create an Ed25519 key pair for signing
    verify: Check a file against its signature

Example:
    Generate an appcast from installers in ./dist:
        ```bash
        $ appcastkit generate -s dist -e exe,msi --file-extract-version \\
            -u https://example.com/downloads
        ```

    Use a config file and override one option:
        ```bash
        $ appcastkit generate --config release/appcast.yaml --channel beta
        ```

    Create signing keys:
        ```bash
        $ appcastkit generate-keys --key-directory keys
        ```

    Verify the appcast signature side-file:
        ```bash
        $ appcastkit verify dist/appcast.xml --key-directory keys
        ```

Exit Codes:

- 0: Success
- 1: Error (configuration, build, serialization or signature failure)

Note:
    The CLI uses argparse for command parsing. Each command has its own
    handler function (cmd_<command>). Verbose mode shows full tracebacks
    on errors for debugging. Flags left unset do not override values from
    the config file.

"""

from __future__ import annotations

import argparse
import base64
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
import sys
from typing import Any

from appcastkit.build import generate_appcast
from appcastkit.build.maker import signature_path_for
from appcastkit.config import load_options
from appcastkit.exceptions import (
    AppcastError,
    BuildError,
    ConfigError,
    SerializationError,
    SigningError,
)
from appcastkit.logging import get_logger, set_global_logger
from appcastkit.signing import Ed25519SignatureManager


def _print_traceback(args: argparse.Namespace) -> None:
    if getattr(args, "verbose", False) or getattr(args, "debug", False):
        import traceback

        traceback.print_exc()


def _overrides_from_args(args: argparse.Namespace) -> dict[str, Any]:
    """Option overrides from CLI flags (None means "not given")."""
    return {
        "source_directory": args.source_directory,
        "extensions": args.extensions,
        "search_subdirectories": args.search_subdirectories,
        "output_directory": args.output_directory,
        "output_file_name": args.output_file_name,
        "appcast_format": args.appcast_format,
        "operating_system": args.operating_system,
        "base_url": args.base_url,
        "prefix_version": args.prefix_version,
        "changelog_path": args.changelog_path,
        "changelog_url": args.changelog_url,
        "changelog_file_name_prefix": args.changelog_file_name_prefix,
        "product_name": args.product_name,
        "file_extract_version": args.file_extract_version,
        "file_version": args.file_version,
        "overwrite_old_items": args.overwrite_old_items,
        "reparse_existing": args.reparse_existing,
        "critical_versions": args.critical_versions,
        "channel": args.channel,
        "signature_file_extension": args.signature_file_extension,
        "key_directory": args.key_directory,
        "human_readable": args.human_readable,
        "use_ed_signature_attribute": args.use_ed_signature_attribute,
        "require_signature": args.require_signature,
    }


def cmd_generate(args: argparse.Namespace) -> int:
    """Handler for 'appcastkit generate' command.

    Loads options (defaults file, --config file, flags), builds the item
    list, writes the appcast and its signature side-file.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for success, 1 for failure).

    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    config_path = Path(args.config).resolve() if args.config else None

    try:
        options = load_options(config_path, _overrides_from_args(args))
        problems = options.validate()
        if problems:
            print(f"Errors ({len(problems)}):")
            for problem in problems:
                print(f"  [X] {problem}")
            return 1
        print(f"Generating appcast from: {options.source_directory}")
        print()
        result = generate_appcast(options, logger=logger)
    except (ConfigError, BuildError, SerializationError, SigningError) as err:
        print(f"Error: {err}")
        _print_traceback(args)
        return 1
    except AppcastError as err:
        # Catch any other appcast errors we might have missed
        print(f"Error: {err}")
        _print_traceback(args)
        return 1

    print("=" * 70)
    print("APPCAST RESULTS")
    print("=" * 70)
    print(f"Product:         {result.product_name or '(none)'}")
    print(f"Appcast:         {result.appcast_path}")
    print(f"Signature:       {result.signature_path or '(not signed)'}")
    print(f"Items:           {len(result.items)}")
    for item in result.items:
        flags = []
        if item.is_critical_update:
            flags.append("critical")
        if item.channel:
            flags.append(f"channel={item.channel}")
        suffix = f" ({', '.join(flags)})" if flags else ""
        print(f"  - {item.version}: {item.download_link}{suffix}")
    if result.notices:
        print()
        print(f"Notices ({len(result.notices)}):")
        for notice in result.notices:
            print(f"  [WARNING] {notice.message}")
    print("=" * 70)
    print()
    print("[SUCCESS] Appcast generated successfully!")
    return 0


def cmd_generate_keys(args: argparse.Namespace) -> int:
    """Handler for 'appcastkit generate-keys' command.

    Args:
        args: Parsed command-line arguments containing key directory and
            force flag.

    Returns:
        Exit code (0 for success, 1 for failure).

    """
    manager = Ed25519SignatureManager(key_directory=args.key_directory)
    try:
        created = manager.generate_keys(force=args.force)
        public_key = base64.b64encode(manager.public_key()).decode("ascii")
    except (SigningError, OSError) as err:
        print(f"Error: {err}")
        _print_traceback(args)
        return 1

    if created:
        print(f"[SUCCESS] Keys written to {manager.key_directory}")
    else:
        print(
            f"[WARNING] Keys already exist in {manager.key_directory}; "
            "use --force to replace them"
        )
    print(f"Public key: {public_key}")
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    """Handler for 'appcastkit verify' command.

    Verifies a file against an explicit signature, a signature file, or
    the default side-file "<file>.<signature extension>".

    Returns:
        Exit code (0 if the signature is valid, 1 otherwise).

    """
    target = Path(args.file)
    if not target.is_file():
        print(f"Error: File not found: {target}")
        return 1

    signature = args.signature
    if signature is None:
        sig_path = (
            Path(args.signature_file)
            if args.signature_file
            else signature_path_for(target, args.signature_file_extension)
        )
        if not sig_path.is_file():
            print(f"Error: Signature file not found: {sig_path}")
            return 1
        signature = sig_path.read_text(encoding="utf-8").strip()

    manager = Ed25519SignatureManager(key_directory=args.key_directory)
    try:
        valid = manager.verify_file(target, signature)
    except SigningError as err:
        print(f"Error: {err}")
        _print_traceback(args)
        return 1

    if valid:
        print(f"[SUCCESS] Signature is valid for {target}")
        return 0
    print(f"[X] Signature is NOT valid for {target}")
    return 1


def _add_verbosity_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )


def _package_version() -> str:
    try:
        return version("appcastkit")
    except PackageNotFoundError:
        return "unknown"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="appcastkit",
        description="appcastkit - build signed appcasts for software update clients",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"appcastkit {_package_version()}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'generate' command
    p_gen = subparsers.add_parser(
        "generate",
        help="Build or update an appcast from a directory of binaries",
        description="Find release binaries, resolve their versions and write a signed appcast.",
    )
    p_gen.add_argument("--config", help="YAML file with generator options")
    p_gen.add_argument(
        "-s", "--source-directory", help="Directory to search for binaries"
    )
    p_gen.add_argument(
        "-e",
        "--ext",
        dest="extensions",
        help="Comma-separated binary extensions (default: exe)",
    )
    p_gen.add_argument(
        "--search-subdirectories",
        action="store_true",
        default=None,
        help="Search the source directory recursively",
    )
    p_gen.add_argument(
        "-o",
        "--output-directory",
        help="Appcast output directory (default: source directory)",
    )
    p_gen.add_argument(
        "--output-file-name", help="Appcast file name without extension (default: appcast)"
    )
    p_gen.add_argument(
        "-f",
        "--format",
        dest="appcast_format",
        help="Appcast format: xml or json (default: xml)",
    )
    p_gen.add_argument(
        "--os",
        dest="operating_system",
        help="Operating system tag: windows, mac or linux (default: windows)",
    )
    p_gen.add_argument("-u", "--base-url", help="Base URL for download links")
    p_gen.add_argument(
        "--prefix-version",
        action="store_true",
        default=None,
        help="Add the version as a folder in download links",
    )
    p_gen.add_argument("--changelog-path", help="Directory with <version>.md release notes")
    p_gen.add_argument("--changelog-url", help="Base URL of published release notes")
    p_gen.add_argument(
        "--changelog-prefix",
        dest="changelog_file_name_prefix",
        help="Release notes file name prefix",
    )
    p_gen.add_argument("-n", "--product-name", help="Product name")
    p_gen.add_argument(
        "--file-extract-version",
        action="store_true",
        default=None,
        help="Read versions from file names instead of binary metadata",
    )
    p_gen.add_argument(
        "--file-version",
        help="Version for the one binary whose version cannot be determined",
    )
    p_gen.add_argument(
        "--overwrite-old-items",
        action="store_true",
        default=None,
        help="Replace existing items that have the same version",
    )
    p_gen.add_argument(
        "--reparse-existing",
        action="store_true",
        default=None,
        help="Keep the items of the existing appcast",
    )
    p_gen.add_argument(
        "--critical-versions", help="Comma-separated versions to mark critical"
    )
    p_gen.add_argument("--channel", help="Channel label for every item")
    p_gen.add_argument(
        "--signature-file-extension",
        help="Extension of the appcast signature file (default: signature)",
    )
    p_gen.add_argument("--key-directory", help="Directory with the Ed25519 keys")
    p_gen.add_argument(
        "--compact",
        dest="human_readable",
        action="store_false",
        default=None,
        help="Write the appcast without indentation",
    )
    p_gen.add_argument(
        "--ed-signature",
        dest="use_ed_signature_attribute",
        action="store_true",
        default=None,
        help="Use sparkle:edSignature attributes in XML",
    )
    p_gen.add_argument(
        "--require-signature",
        action="store_true",
        default=None,
        help="Fail if the appcast cannot be signed and verified",
    )
    _add_verbosity_flags(p_gen)
    p_gen.set_defaults(func=cmd_generate)

    # 'generate-keys' command
    p_keys = subparsers.add_parser(
        "generate-keys",
        help="Create an Ed25519 key pair for signing",
        description="Write base64-encoded Ed25519 private/public keys to the key directory.",
    )
    p_keys.add_argument(
        "--key-directory",
        default=None,
        help="Directory for the key files (default: ~/.appcastkit/keys)",
    )
    p_keys.add_argument(
        "--force", action="store_true", help="Overwrite existing key files"
    )
    _add_verbosity_flags(p_keys)
    p_keys.set_defaults(func=cmd_generate_keys)

    # 'verify' command
    p_verify = subparsers.add_parser(
        "verify",
        help="Check a file against its signature",
        description="Verify a file with the public key and a signature or signature file.",
    )
    p_verify.add_argument("file", help="File to verify (e.g. the appcast)")
    p_verify.add_argument("--signature", help="Base64 signature to check")
    p_verify.add_argument(
        "--signature-file",
        help="File holding the signature (default: <file>.<extension>)",
    )
    p_verify.add_argument(
        "--signature-file-extension",
        default="signature",
        help="Side-file extension when --signature-file is not given",
    )
    p_verify.add_argument("--key-directory", help="Directory with the Ed25519 keys")
    _add_verbosity_flags(p_verify)
    p_verify.set_defaults(func=cmd_verify)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the appcastkit CLI.

    This function is registered as the 'appcastkit' console script in
    pyproject.toml.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
