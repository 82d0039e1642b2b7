#!/usr/bin/env python3
"""
EULA gate command line.

Usage:
    python main.py check                  # Run the startup gates interactively
    python main.py status                 # Show stored acceptance and expiration
    python main.py forget                 # Remove the acceptance for this version
    python main.py reset                  # Remove all acceptances of the product
    python main.py --version 1.2.0 check  # Override the product version
"""
import argparse
import logging
import sys
from datetime import datetime
from typing import List, Optional

import build_info
import expiration_gate
from acceptance_store import AcceptanceStore
from config import Settings, settings
from eula_verifier import EulaVerifier
from launch import run_startup_checks
from models import ProjectIdentity
from prompts import ConsolePrompt
from version_compat import version_from_key


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Offline EULA and build expiration gate")
    parser.add_argument("--name", help="Product name (default: EULA_PROJECT_NAME)")
    parser.add_argument("--version", dest="project_version", help="Product version (default: EULA_PROJECT_VERSION)")
    parser.add_argument("--log-level", help="Logging level (default: EULA_LOG_LEVEL)")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("check", help="Run EULA, expiration and usage-terms gates")
    subparsers.add_parser("status", help="Show acceptance and expiration state")
    subparsers.add_parser("forget", help="Remove the stored acceptance for this version")
    subparsers.add_parser("reset", help="Remove every stored acceptance of this product")
    return parser


def _identity(args: argparse.Namespace, config: Settings) -> ProjectIdentity:
    return ProjectIdentity(
        name=args.name or config.PROJECT_NAME,
        version=args.project_version or config.PROJECT_VERSION,
    )


def cmd_check(identity: ProjectIdentity, config: Settings) -> int:
    result = run_startup_checks(identity, config, ConsolePrompt())
    if result.proceed:
        print(f"\n  ✓ {identity.name} {identity.version} may start")
        return 0
    print(f"\n  ✗ Startup blocked: {result.decision.value}")
    return 1


def cmd_status(identity: ProjectIdentity, config: Settings) -> int:
    store = AcceptanceStore.load(identity.name, config)
    verifier = EulaVerifier(identity, config, store=store)
    policy = expiration_gate.load_policy(build_info.EXPIRATION_DATE, config.app_dir(), config.OVERRIDE_MARKER)
    gate = expiration_gate.check(policy, datetime.now(), block_on_invalid=config.BLOCK_ON_INVALID_EXPIRATION)

    print(f"  Store:       {store.path} ({store.load_status.value})")
    if store.load_error:
        print(f"  Load error:  {store.load_error}")
    print(f"  Records:     {len(store)}")
    print(f"  Authorized:  {'yes' if verifier.is_eula_accepted() else 'no'}")
    print(f"  Expiration:  {policy.expiration_date or policy.status.value}")
    print(f"  Override:    {'present' if policy.override_present else 'absent'}")
    print(f"  Gate:        {gate.value}")
    return 0


def cmd_forget(identity: ProjectIdentity, config: Settings) -> int:
    store = AcceptanceStore.load(identity.name, config)
    if not store.remove(identity.config_key):
        print(f"  No acceptance stored for {identity.config_key}")
        verifier = EulaVerifier(identity, config, store=store)
        matched = verifier.resolver.find_compatible_key(store, identity.name, identity.version)
        if matched is not None:
            print(f"  {identity.version} is still authorized by compatible record {matched}")
            print(f"  Use --version {version_from_key(matched, identity.name)} forget, or reset")
        return 0
    if not store.save():
        print(f"  Could not update {store.path}")
        return 1
    print(f"  Removed acceptance for {identity.config_key}")
    return 0


def cmd_reset(identity: ProjectIdentity, config: Settings) -> int:
    store = AcceptanceStore.load(identity.name, config)
    count = len(store)
    store.clear()
    if not store.save():
        print(f"  Could not update {store.path}")
        return 1
    print(f"  Removed {count} acceptance(s) for {identity.name}")
    return 0


COMMANDS = {
    "check": cmd_check,
    "status": cmd_status,
    "forget": cmd_forget,
    "reset": cmd_reset,
}


def main(argv: Optional[List[str]] = None, config: Settings = settings) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=(args.log_level or config.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    return COMMANDS[args.command](_identity(args, config), config)


if __name__ == "__main__":
    sys.exit(main())
