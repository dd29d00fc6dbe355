"""
Run the discount function once: cart snapshot JSON in, operations JSON out.

    python -m bundle_deals < input.json
    python -m bundle_deals input.json
"""
import json
import sys
from pathlib import Path

from bundle_deals.core.logging_config import setup_logging
from bundle_deals.engine.discount_engine import cart_lines_discounts_generate_run


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    # logs go to stderr here, stdout carries the result
    setup_logging(stream=sys.stderr)

    if argv:
        payload = json.loads(Path(argv[0]).read_text(encoding="utf-8"))
    else:
        payload = json.load(sys.stdin)

    out = cart_lines_discounts_generate_run(payload)
    sys.stdout.write(json.dumps(out, ensure_ascii=False) + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
