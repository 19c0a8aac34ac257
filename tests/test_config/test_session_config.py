"""
Test Suite for SessionConfig and RuntimeConfig.

Covers defaults, bound validation, split consistency, immutable updates
and CLI factories.
"""

# Standard Imports
from argparse import Namespace

# Third-Party Imports
import pytest
from pydantic import ValidationError

# Internal Imports
from geomaker.core.config import DEFAULT_NUM_CLASSES, RuntimeConfig, SessionConfig
from geomaker.core.config.session_config import PARAMETER_LABELS


# SESSION CONFIG: DEFAULTS
@pytest.mark.unit
def test_session_config_defaults():
    """Test SessionConfig default values."""
    config = SessionConfig()

    assert config.model_name == "resnet50"
    assert config.fine_tune is True
    assert config.num_classes == DEFAULT_NUM_CLASSES
    assert config.epochs == 10
    assert config.patience == 3
    assert config.cam_method == "grad_cam"


@pytest.mark.unit
def test_parameter_labels_cover_every_field():
    """Every schema field has a presentation label."""
    assert set(PARAMETER_LABELS) == set(SessionConfig.model_fields)


# SESSION CONFIG: VALIDATION
@pytest.mark.unit
@pytest.mark.parametrize(
    "field, value",
    [
        ("epochs", 0),
        ("patience", 0),
        ("batch_size", 0),
        ("learning_rate", 0.0),
        ("num_classes", -1),
        ("train_split", 1.0),
    ],
)
def test_session_config_rejects_out_of_range(field, value):
    """Out-of-range parameters are rejected at construction."""
    with pytest.raises(ValidationError):
        SessionConfig(**{field: value})


@pytest.mark.unit
def test_split_sum_must_not_exceed_one():
    """train_split + valid_split above 1.0 is rejected."""
    with pytest.raises(ValidationError, match="exceeds 1.0"):
        SessionConfig(train_split=0.8, valid_split=0.3)


@pytest.mark.unit
def test_session_config_is_frozen():
    """Direct assignment is forbidden."""
    config = SessionConfig()

    with pytest.raises(ValidationError):
        config.epochs = 3


@pytest.mark.unit
def test_session_config_forbids_unknown_fields():
    with pytest.raises(ValidationError):
        SessionConfig(dropout=0.5)


# SESSION CONFIG: UPDATES
@pytest.mark.unit
def test_with_updates_returns_new_validated_copy():
    """with_updates leaves the original untouched."""
    config = SessionConfig()
    updated = config.with_updates(epochs=20, fine_tune=False)

    assert updated.epochs == 20
    assert updated.fine_tune is False
    assert config.epochs == 10


@pytest.mark.unit
def test_with_updates_revalidates():
    with pytest.raises(ValidationError):
        SessionConfig().with_updates(epochs=-5)


# SESSION CONFIG: CLI FACTORY
@pytest.mark.unit
def test_from_args_ignores_none_and_unknown():
    """Only provided schema fields override defaults."""
    args = Namespace(epochs=7, patience=None, archive="x.zip", fine_tune=False)
    config = SessionConfig.from_args(args)

    assert config.epochs == 7
    assert config.patience == 3
    assert config.fine_tune is False


# RUNTIME CONFIG
@pytest.mark.unit
def test_runtime_config_defaults():
    runtime = RuntimeConfig()

    assert runtime.max_samples_per_class == 3
    assert runtime.max_total_samples == 10
    assert runtime.default_num_classes == DEFAULT_NUM_CLASSES
    assert runtime.seed is None


@pytest.mark.unit
def test_runtime_config_rejects_inverted_sampling_bounds():
    with pytest.raises(ValidationError):
        RuntimeConfig(eval_samples_min=50, eval_samples_max=10)


@pytest.mark.unit
def test_runtime_config_from_args():
    args = Namespace(tick_interval=0.0, seed=42, epochs=3)
    runtime = RuntimeConfig.from_args(args)

    assert runtime.tick_interval == 0.0
    assert runtime.seed == 42
