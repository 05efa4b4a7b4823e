"""Loading the same client configuration from YAML and from JSON.

Run from the repository root:
    python examples/load_config.py
"""
import os

from clientcheck.config import load_config, missing_required_keys, load_document

HERE = os.path.dirname(os.path.abspath(__file__))

for name in ("acme_client.yaml", "acme_client.json"):
    path = os.path.join(HERE, name)
    raw = load_document(path)
    print(f"{name}: missing keys = {missing_required_keys(raw) or 'none'}")

    config = load_config(path)
    print(f"  client={config.client!r} base_url={config.base_url!r}")
    print(f"  tests={config.tests}")
    print(f"  records={[r.to_dict() for r in config.test_data]}")
