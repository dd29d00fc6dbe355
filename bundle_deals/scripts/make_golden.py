import json
from pathlib import Path

from bundle_deals.core.settings import DEFAULT_PRICING_CONFIG
from bundle_deals.engine.discount_engine import BundleDiscountEngine

ROOT = Path(__file__).resolve().parents[1]
fixtures = ROOT / "tests" / "fixtures"

engine = BundleDiscountEngine.from_yaml_file(str(DEFAULT_PRICING_CONFIG))

for name in ("product", "order"):
    inp = json.loads((fixtures / "input.v1.sample.json").read_text(encoding="utf-8"))
    out = engine.run(inp, mode=name).to_payload()

    (fixtures / f"output.v1.{name}.golden.json").write_text(
        json.dumps(out, indent=2, ensure_ascii=False, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    print(f"Wrote tests/fixtures/output.v1.{name}.golden.json")
