"""Render-pipeline templates shared by the live preview and key bindings.

Every pipeline is assembled from the same named slots (base prefix,
transform flag, query placeholder, input tokens, post-filter command), so
the preview and all bindings stay in agreement about the render tool, its
flags, and the inputs it reads.
"""

from __future__ import annotations

import enum
import os
from collections.abc import Sequence
from dataclasses import dataclass, field

from .errors import ConfigError
from .inputs import InputLocation
from .settings import SessionConfig

QUERY_PLACEHOLDER = "{q}"
IDENTITY_FILTER = "."
RAW_OUTPUT_FLAG = "--raw-output"
SLURP_FLAG = "--slurp"
BASE_PROMPT = "> "


class BindingAction(enum.Enum):
    """How the selector applies a bound pipeline."""

    PREVIEW = "preview"
    CHANGE_PREVIEW = "change-preview"
    EXECUTE = "execute"


@dataclass(frozen=True)
class PipelineTemplate:
    """A pipeline string built from fixed slots.

    ``query`` is emitted verbatim; the selector substitutes it with the
    typed text. Empty slots are skipped so nothing dangles when there are
    no inputs or no post-filter.
    """

    prefix: tuple[str, ...]
    transform: str | None = None
    query: str = QUERY_PLACEHOLDER
    inputs: tuple[str, ...] = ()
    post_filter: str | None = None

    def render(self) -> str:
        parts = [*self.prefix]
        if self.transform:
            parts.append(self.transform)
        parts.append(self.query)
        parts.extend(token for token in self.inputs if token)
        command = " ".join(part for part in parts if part)
        if self.post_filter:
            command = f"{command} | {self.post_filter}"
        return command

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class PipelineBinding:
    """One key bound to a pipeline inside the selector."""

    key: str
    action: BindingAction
    template: PipelineTemplate
    prompt: str | None = None
    undo_key: str | None = None

    @property
    def is_toggle(self) -> bool:
        return self.undo_key is not None

    def to_argument(self) -> str:
        actions: list[str] = []
        if self.prompt is not None:
            actions.append(f"change-prompt({self.prompt})")
        actions.append(f"{self.action.value}:{self.template.render()}")
        return f"--bind={self.key}:{'+'.join(actions)}"


@dataclass(frozen=True)
class PipelineSet:
    """Everything the selector needs: base prefix, preview, and bindings."""

    prefix: tuple[str, ...]
    preview: PipelineTemplate
    bindings: tuple[PipelineBinding, ...] = field(default_factory=tuple)

    def binding(self, key: str) -> PipelineBinding:
        for candidate in self.bindings:
            if candidate.key == key:
                return candidate
        raise KeyError(key)

    def toggle_pairs(self) -> list[tuple[PipelineBinding, PipelineBinding]]:
        """Return ``(toggle, undo)`` pairs in binding order."""
        return [(binding, self.binding(binding.undo_key)) for binding in self.bindings if binding.undo_key]


def _join_command(program: str, options: str) -> str:
    options = options.strip()
    return f"{program} {options}" if options else program


def _prefix_parts(config: SessionConfig, color: bool, expand_home: bool) -> list[str]:
    prefix: list[str] = [config.jq_bin]
    for lib in config.library_dirs():
        prefix.extend(["-L", os.path.expanduser(lib) if expand_home else lib])
    prefix.append(RAW_OUTPUT_FLAG)
    if color:
        prefix.append(config.color_flag)
    if config.null_input:
        prefix.append(config.null_input_flag)
    if config.raw_input:
        prefix.append(config.raw_input_flag)
    prefix.extend(config.jq_args)
    return [part for part in prefix if part]


def build_prefix(config: SessionConfig) -> tuple[str, ...]:
    """Return the render-tool invocation shared by every pipeline."""
    return tuple(_prefix_parts(config, color=True, expand_home=False))


def render_command(
    config: SessionConfig,
    locations: Sequence[InputLocation],
    query: str,
    color: bool,
) -> list[str]:
    """Return the argv for rendering an accepted query outside the selector.

    No shell is involved, so library paths get their ``~`` expanded here.
    An empty query becomes the identity filter. With ``pass_as_stdin`` the
    caller feeds the single input on standard input instead.
    """
    command = _prefix_parts(config, color=color, expand_home=True)
    command.append(query or IDENTITY_FILTER)
    if not config.null_input and not config.pass_as_stdin:
        command.extend(str(location.path) for location in locations)
    return command


def input_tokens(config: SessionConfig, locations: Sequence[InputLocation]) -> tuple[str, ...]:
    """Return the input slot; empty in null-input mode."""
    if config.null_input:
        return ()
    tokens = tuple(location.token() for location in locations)
    if config.pass_as_stdin and tokens:
        if len(tokens) > 1:
            raise ConfigError("--pass-as-stdin accepts a single input")
        return (f"< {tokens[0]}",)
    return tokens


def build_pipelines(config: SessionConfig, locations: Sequence[InputLocation]) -> PipelineSet:
    """Build the live preview pipeline plus all key bindings.

    Toggles come in pairs: the second key of each pair restores the exact
    preview pipeline. Binding order is fixed so generated commands are
    stable across runs.
    """
    prefix = build_prefix(config)
    inputs = input_tokens(config, locations)

    def template(transform: str | None = None, post_filter: str | None = None) -> PipelineTemplate:
        return PipelineTemplate(prefix=prefix, transform=transform, inputs=inputs, post_filter=post_filter)

    preview = template()

    def toggle(
        key: str,
        undo_key: str,
        action: BindingAction,
        prompt: str,
        transform: str | None,
        post_filter: str | None = None,
    ) -> list[PipelineBinding]:
        return [
            PipelineBinding(key, action, template(transform, post_filter), prompt=prompt, undo_key=undo_key),
            PipelineBinding(undo_key, action, preview, prompt=BASE_PROMPT),
        ]

    def execute(key: str, transform: str | None, post_filter: str) -> PipelineBinding:
        return PipelineBinding(key, BindingAction.EXECUTE, template(transform, post_filter))

    monochrome = config.no_color_flag
    bindings = [
        *toggle("alt-s", "alt-S", BindingAction.CHANGE_PREVIEW, "-s> ", SLURP_FLAG),
        *toggle("alt-c", "alt-C", BindingAction.PREVIEW, f"{config.compact_flag}> ", config.compact_flag),
        *toggle(
            "ctrl-space",
            "alt-space",
            BindingAction.CHANGE_PREVIEW,
            "gron> ",
            monochrome,
            f"{config.gron_bin} --colorize",
        ),
        execute("alt-e", monochrome, _join_command(config.editor, config.editor_options)),
        execute("alt-v", monochrome, f"{config.vd_bin} --filetype json"),
        execute("alt-V", monochrome, f"{config.vd_bin} --filetype csv"),
        execute("alt-l", None, _join_command(config.pager, config.pager_options)),
        execute("alt-L", monochrome, f"{config.bat_bin} --language json"),
    ]
    return PipelineSet(prefix=prefix, preview=preview, bindings=tuple(bindings))
