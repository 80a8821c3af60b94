"""Alert rule storage, built-in defaults and YAML loading."""
import copy
import logging
from dataclasses import fields, replace
from pathlib import Path

import yaml

from models.alerts import AlertRule
from models.enums import MetricName, Operator

logger = logging.getLogger("v1z3r.alerts.rules")

DEFAULT_RULES = [
    AlertRule(
        id="high-response-time",
        name="High Response Time",
        metric="responseTime",
        threshold=1000,
        operator="gt",
        severity="warning",
        duration=30000,
        enabled=True,
        description="API response time is above 1 second",
    ),
    AlertRule(
        id="critical-response-time",
        name="Critical Response Time",
        metric="responseTime",
        threshold=3000,
        operator="gt",
        severity="critical",
        duration=10000,
        enabled=True,
        description="API response time is critically high (>3s)",
    ),
    AlertRule(
        id="high-error-rate",
        name="High Error Rate",
        metric="errorRate",
        threshold=5,
        operator="gt",
        severity="warning",
        duration=60000,
        enabled=True,
        description="Error rate is above 5%",
    ),
    AlertRule(
        id="critical-error-rate",
        name="Critical Error Rate",
        metric="errorRate",
        threshold=10,
        operator="gt",
        severity="critical",
        duration=30000,
        enabled=True,
        description="Error rate is critically high (>10%)",
    ),
    AlertRule(
        id="low-frame-rate",
        name="Low WebGL Frame Rate",
        metric="webglFrameRate",
        threshold=30,
        operator="lt",
        severity="warning",
        duration=30000,
        enabled=True,
        description="WebGL frame rate dropped below 30 FPS",
    ),
    AlertRule(
        id="high-memory-usage",
        name="High Memory Usage",
        metric="memoryUsage",
        threshold=85,
        operator="gt",
        severity="warning",
        duration=120000,
        enabled=True,
        description="Memory usage is above 85%",
    ),
    AlertRule(
        id="poor-lcp",
        name="Poor Largest Contentful Paint",
        metric="lcp",
        threshold=2500,
        operator="gt",
        severity="warning",
        duration=60000,
        enabled=True,
        description="LCP is above 2.5 seconds (poor user experience)",
    ),
    AlertRule(
        id="poor-fid",
        name="Poor First Input Delay",
        metric="fid",
        threshold=100,
        operator="gt",
        severity="warning",
        duration=60000,
        enabled=True,
        description="FID is above 100ms (poor interactivity)",
    ),
    AlertRule(
        id="low-cache-hit-rate",
        name="Low Cache Hit Rate",
        metric="cacheHitRate",
        threshold=70,
        operator="lt",
        severity="info",
        duration=300000,
        enabled=True,
        description="Cache hit rate is below 70%",
    ),
]

_RULE_FIELDS = {f.name for f in fields(AlertRule)} - {"id"}
_VALID_OPERATORS = {op.value for op in Operator}


def default_rules():
    """Fresh copies of the built-in rules, safe to mutate."""
    return [copy.deepcopy(r) for r in DEFAULT_RULES]


class RulesManager:
    """Rules keyed by id. Insertion order is evaluation order."""

    def __init__(self, rules=None):
        self.rules = {}
        for rule in default_rules() if rules is None else rules:
            self.add_rule(rule)

    def add_rule(self, rule):
        if isinstance(rule, dict):
            rule = AlertRule.from_dict(rule)
        if not MetricName.is_known(rule.metric):
            logger.warning(f"Rule {rule.id} watches unknown metric '{rule.metric}'")
        if rule.operator not in _VALID_OPERATORS:
            logger.warning(f"Rule {rule.id} has unsupported operator '{rule.operator}'; it will never fire")
        self.rules[rule.id] = rule

    def remove_rule(self, rule_id):
        self.rules.pop(rule_id, None)

    def update_rule(self, rule_id, changes):
        """Merge partial changes into an existing rule. Unknown ids are ignored."""
        rule = self.rules.get(rule_id)
        if rule is None:
            logger.debug(f"update_rule: no rule with id {rule_id}")
            return
        unknown = set(changes) - _RULE_FIELDS
        if unknown:
            logger.warning(f"update_rule: ignoring fields {sorted(unknown)} for {rule_id}")
        updates = {k: v for k, v in changes.items() if k in _RULE_FIELDS}
        self.rules[rule_id] = replace(rule, **updates)

    def clear(self):
        self.rules.clear()

    def get_rule(self, rule_id):
        return self.rules.get(rule_id)

    def get_all_rules(self):
        return list(self.rules.values())

    def get_enabled_rules(self):
        return [r for r in self.rules.values() if r.enabled]

    def load_yaml(self, path):
        """Add rules from a YAML file with a top-level ``rules:`` list."""
        path = Path(path)
        if not path.exists():
            logger.warning(f"Alert rules file not found: {path}")
            return 0
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        raw_rules = data.get("rules", [])
        for r in raw_rules:
            self.add_rule(AlertRule.from_dict(r))
        logger.info(f"Loaded {len(raw_rules)} rules from {path}")
        return len(raw_rules)

    def __len__(self):
        return len(self.rules)

    def __contains__(self, rule_id):
        return rule_id in self.rules
