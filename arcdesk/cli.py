from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from typing import Any

from modulekit import (
    ChannelRouter,
    Kernel,
    KernelError,
    check_sources,
    dependency_layers,
    discover_modules,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="arcdesk", add_help=True)
    parser.add_argument("--config", default=None, help="Config file (default: config/config.yaml + local overlay)")
    sub = parser.add_subparsers(dest="command", required=True)

    modules = sub.add_parser("modules", help="List discovered modules")
    modules.add_argument("--graph", action="store_true", help="Print dependency layers")

    sub.add_parser("check", help="Run discovery, governance and resolution without booting")
    sub.add_parser("boot", help="Boot the app and list published channels")

    invoke = sub.add_parser("invoke", help="Boot the app and invoke one channel")
    invoke.add_argument("channel", help="Channel name, e.g. arc:settings:get")
    invoke.add_argument("payload", nargs="?", default=None, help="JSON payload")

    return parser


def _list_modules(graph: bool) -> int:
    from arcdesk.modules.registry import get_module_sources

    if graph:
        _, registry, _ = check_sources(get_module_sources())
        for idx, layer in enumerate(dependency_layers(registry)):
            print(f"{idx}: {', '.join(layer)}")
        return 0

    for module in discover_modules(get_module_sources()):
        descriptor = module.descriptor
        print(module.name)
        print(f"  capabilities: {', '.join(descriptor.capabilities) or '-'}")
        print(f"  depends:      {', '.join(descriptor.depends) or '-'}")
        print(f"  emits:        {', '.join(descriptor.emits) or '-'}")
    return 0


def _check() -> int:
    from arcdesk.modules.registry import get_module_sources

    try:
        discovered, _, order = check_sources(get_module_sources())
    except KernelError as exc:
        print(f"check failed: {exc}", file=sys.stderr)
        return 1
    print(f"OK: {len(discovered)} modules")
    print(f"boot order: {' -> '.join(order)}")
    return 0


def _boot(config_path: str | None) -> tuple[Kernel, ChannelRouter]:
    from arcdesk.app.bootstrap import create_app_kernel
    from arcdesk.foundation.config_io import load_config
    from arcdesk.foundation.logging_utils import setup_operational_logger
    from arcdesk.framework.config import BootConfig

    cfg_dict, cfg_meta = load_config(config_path)
    boot_config = BootConfig.from_dict(cfg_dict)
    logger, _ = setup_operational_logger(boot_config.resolved_log_dir, level=boot_config.log_level)
    logger.info("Loaded config (%s): %s", cfg_meta["mode"], ", ".join(cfg_meta["paths"]))

    router = ChannelRouter()
    kernel = create_app_kernel(boot_config, logger=logger, router=router)
    kernel.boot()
    return kernel, router


def _parse_payload(raw: str | None) -> Any:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON payload: {exc}") from exc


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)

    if args.command == "modules":
        return _list_modules(args.graph)

    if args.command == "check":
        return _check()

    if args.command == "boot":
        kernel, router = _boot(args.config)
        print(f"booted: {' -> '.join(kernel.modules())}")
        for name in router.channels():
            print(name)
        return 0

    if args.command == "invoke":
        payload = _parse_payload(args.payload)
        _, router = _boot(args.config)
        result = router.invoke(args.channel, payload)
        print(json.dumps(result, indent=2, ensure_ascii=False, default=str))
        return 0

    raise AssertionError(f"Unhandled command: {args.command}")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main(sys.argv[1:]))
