"""Unit tests for converting label selectors to selector strings."""

import pytest
from authproxy.common.models.labels import Labels, valid_label_key
from authproxy.types.schemas import LabelSelectorSchema
from authproxy.utils.errors import LabelSelectorError


def selector(data):
    return LabelSelectorSchema().load(data)


class TestLabelsFromSelector:

    def test_none_selector_is_empty(self):
        assert Labels.from_selector(None).is_empty()

    def test_match_labels(self):
        labels = Labels.from_selector(selector({"matchLabels": {"tier": "web", "app": "shop"}}))
        assert labels.as_str() == "app=shop,tier=web"

    def test_match_expressions(self):
        labels = Labels.from_selector(
            selector(
                {
                    "matchExpressions": [
                        {"key": "env", "operator": "In", "values": ["prod", "dev"]},
                        {"key": "track", "operator": "NotIn", "values": ["canary"]},
                        {"key": "team", "operator": "Exists"},
                        {"key": "legacy", "operator": "DoesNotExist"},
                    ]
                }
            )
        )
        assert labels.as_str() == "env in (dev,prod),track notin (canary),team,!legacy"

    def test_labels_and_expressions_combined(self):
        labels = Labels.from_selector(
            selector(
                {
                    "matchLabels": {"app": "shop"},
                    "matchExpressions": [{"key": "team", "operator": "Exists"}],
                }
            )
        )
        assert labels.as_str() == "app=shop,team"

    def test_unknown_operator(self):
        with pytest.raises(LabelSelectorError, match="not a valid"):
            Labels.from_selector(
                selector({"matchExpressions": [{"key": "a", "operator": "Near"}]})
            )

    def test_in_requires_values(self):
        with pytest.raises(LabelSelectorError, match="non-empty"):
            Labels.from_selector(
                selector({"matchExpressions": [{"key": "a", "operator": "In", "values": []}]})
            )

    def test_exists_forbids_values(self):
        with pytest.raises(LabelSelectorError, match="must be empty"):
            Labels.from_selector(
                selector(
                    {"matchExpressions": [{"key": "a", "operator": "Exists", "values": ["x"]}]}
                )
            )

    def test_invalid_key(self):
        with pytest.raises(LabelSelectorError, match="invalid label key"):
            Labels.from_selector(selector({"matchLabels": {"bad key": "x"}}))

    def test_invalid_value(self):
        with pytest.raises(LabelSelectorError, match="invalid value"):
            Labels.from_selector(selector({"matchLabels": {"app": "-bad-"}}))


class TestValidLabelKey:

    @pytest.mark.parametrize("key", ["app", "app.kubernetes.io/name", "a_b-c.d"])
    def test_valid(self, key):
        assert valid_label_key(key)

    @pytest.mark.parametrize("key", ["", "-app", "Example.COM/app", "a" * 64, "ex.com/"])
    def test_invalid(self, key):
        assert not valid_label_key(key)
