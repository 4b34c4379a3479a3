"""Policy loader — YAML serialization and deserialization for ConstraintPolicy.

Lets style budgets and density lenses live in reviewable, version-controlled
YAML files instead of code.
"""

from pathlib import Path

import structlog
import yaml

from .policy import ConstraintPolicy

logger = structlog.get_logger(__name__)


def save_policy(policy: ConstraintPolicy, path: str | Path) -> None:
    """Serialize a ConstraintPolicy to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = policy.to_dict()
    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False,
                  allow_unicode=True, width=120)


def load_policy(path: str | Path) -> ConstraintPolicy:
    """Deserialize a ConstraintPolicy from a YAML file.

    An empty file yields the default policy. Anything other than a mapping
    at the top level is a ValueError.
    """
    path = Path(path)
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Policy file {path} must contain a mapping, got {type(data).__name__}")
    policy = ConstraintPolicy.from_dict(data)
    logger.debug("policy_loaded", path=str(path), lenses=sorted(policy.lenses))
    return policy
