from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from media_pipeline.config import extraction_timeout_default, load_pipeline_config
from media_pipeline.enums import FanOutPolicy, TaskType
from media_pipeline.errors import UnsupportedDispatch


_TASK_ALIASES = {
    "classify": TaskType.CLASSIFICATION,
    "segment": TaskType.SEGMENTATION,
    "detect": TaskType.DETECTION,
}


def parse_task_type(value: Any) -> TaskType:
    if isinstance(value, TaskType):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TASK_ALIASES:
        return _TASK_ALIASES[normalized]
    try:
        return TaskType(normalized)
    except ValueError as exc:
        raise UnsupportedDispatch(f"task type {value!r}") from exc


@dataclass(frozen=True, slots=True)
class InferenceOptions:
    """Per-request configuration bundle; every field has a default."""

    fps: float = 1.0
    target_width: int = 224
    target_height: int = 224
    normalize: bool = True
    labels: tuple[str, ...] = ()
    fan_out_policy: FanOutPolicy = FanOutPolicy.FAIL_FAST
    max_concurrency: int | None = None
    extraction_timeout_s: float = 10.0

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None = None, *, use_config: bool = True) -> InferenceOptions:
        """Merge *options* over the pipeline.yaml defaults and validate the result."""
        merged: dict[str, Any] = {}
        if use_config:
            merged.update(_config_defaults())
        if options:
            unknown = set(options) - set(cls.__dataclass_fields__)
            if unknown:
                raise ValueError(f"Unknown inference options: {', '.join(sorted(unknown))}")
            merged.update({key: value for key, value in options.items() if value is not None})
        return cls._build(merged)

    @classmethod
    def _build(cls, values: dict[str, Any]) -> InferenceOptions:
        defaults = cls()
        fps = float(values.get("fps", defaults.fps))
        if fps < 0:
            raise ValueError("fps must be non-negative")
        target_width = int(values.get("target_width", defaults.target_width))
        target_height = int(values.get("target_height", defaults.target_height))
        if target_width <= 0 or target_height <= 0:
            raise ValueError("target dimensions must be positive integers")
        max_concurrency = values.get("max_concurrency", defaults.max_concurrency)
        if max_concurrency is not None:
            max_concurrency = int(max_concurrency)
            if max_concurrency <= 0:
                raise ValueError("max_concurrency must be a positive integer when provided")
        timeout = float(values.get("extraction_timeout_s", defaults.extraction_timeout_s))
        if timeout <= 0:
            raise ValueError("extraction_timeout_s must be positive")
        policy_value = values.get("fan_out_policy", defaults.fan_out_policy)
        try:
            if isinstance(policy_value, FanOutPolicy):
                policy = policy_value
            else:
                policy = FanOutPolicy(str(policy_value).strip().lower())
        except ValueError as exc:
            raise ValueError(f"Unsupported fan-out policy: {policy_value}") from exc
        labels = values.get("labels", defaults.labels) or ()
        return cls(
            fps=fps,
            target_width=target_width,
            target_height=target_height,
            normalize=bool(values.get("normalize", defaults.normalize)),
            labels=tuple(str(label) for label in labels),
            fan_out_policy=policy,
            max_concurrency=max_concurrency,
            extraction_timeout_s=timeout,
        )


@dataclass(slots=True)
class InferenceRequest:
    """One dispatch invocation; built per call and never persisted."""

    task_type: TaskType
    media: Any
    model: Any | None = None
    options: InferenceOptions = field(default_factory=InferenceOptions)

    def __post_init__(self) -> None:
        self.task_type = parse_task_type(self.task_type)


def _config_defaults() -> dict[str, Any]:
    config = load_pipeline_config()
    defaults: dict[str, Any] = {}
    inference = config.get("inference", {})
    if isinstance(inference, dict):
        defaults.update(inference)
    defaults["extraction_timeout_s"] = extraction_timeout_default()
    return defaults
