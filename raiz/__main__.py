import argparse
import json
import logging
import sys
from typing import List, Optional

from raiz.__version__ import __version__
from raiz.core.errors import InputError, RaizError
from raiz.core.registry import REGISTRY_URL, RegistryClient
from raiz.tools import analyze_npm_package, get_npm_dependencies_tree


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="raiz", description="Show the dependency tree of an npm package")
    parser.add_argument("package", help="npm package name, e.g. express or @types/node")
    parser.add_argument("-V", "--version", dest="pin", default=None, help="exact version to analyze (default: latest)")
    parser.add_argument("-d", "--max-depth", type=int, default=None, help="tree depth ceiling (default 5, max 10)")
    parser.add_argument("--analyze", action="store_true", help="flat JSON analysis of one version instead of the tree")
    parser.add_argument("--json", action="store_true", help="print the result as JSON instead of opening the UI")
    parser.add_argument("--timeout", type=float, default=None, help="seconds allowed for the whole traversal")
    parser.add_argument("--registry", default=REGISTRY_URL, help="registry base URL")
    parser.add_argument("--log-file", default="debug.log", help="where to write the debug log")
    parser.add_argument("--about", action="version", version=f"raiz {__version__}")
    return parser


def run_json(args: argparse.Namespace) -> int:
    try:
        with RegistryClient(base_url=args.registry) as client:
            if args.analyze:
                result = analyze_npm_package(args.package, args.pin, client=client)
            else:
                result = get_npm_dependencies_tree(
                    args.package, args.pin, args.max_depth, client=client, timeout=args.timeout
                )
    except InputError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except RaizError as e:
        logging.error(f"Lookup failed: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """ Entrypoint when is installed via pip """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        filename=args.log_file,
        level=logging.DEBUG,
        filemode="w",
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    if args.json or args.analyze:
        return run_json(args)

    from raiz.app import RaizApp

    app = RaizApp(
        package_name=args.package,
        version=args.pin,
        max_depth=args.max_depth,
        registry_url=args.registry,
        timeout=args.timeout,
    )
    app.run()
    return 0


# Development mode
if __name__ == "__main__":
    sys.exit(main())
