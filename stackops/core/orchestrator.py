"""
Ephemeral stack orchestration.

For each template stack, in order: derive a unique stack name, select or
create and record it, then copy the template's configuration and layer
caller overrides on top. Then apply, refresh, check stability and validate
each stack in order. On exit every recorded stack is fully deleted in reverse order,
unless skip-delete mode is set.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Sequence

from stackops.core.deployment import ConfigMap, Deployment, DeploymentEngine, PulumiEngine
from stackops.core.errors import StackOpsError, TeardownError, ValidationError
from stackops.core.models import RunContext
from stackops.core.naming import DEFAULT_ID_LENGTH, generate_stack_name
from stackops.core.runner import StackCommandExecutor
from stackops.core.settings import HarnessSettings, RunOptions
from stackops.core.teardown import ProtectionClearer, teardown_all, unprotect_all

logger = logging.getLogger(__name__)

ConfigOverride = Callable[[str, ConfigMap, str], Optional[ConfigMap]]
Validator = Callable[[str, Deployment], None]


def configure_stack(
    template: str,
    stack: Deployment,
    config: ConfigOverride | None = None,
) -> None:
    base_config = stack.get_all_config(template)
    stack.set_all_config(base_config)

    if config is not None:
        overrides = config(template, dict(base_config), stack.name) or {}
        stack.set_all_config(overrides)


def apply_stack(
    template: str,
    stack: Deployment,
    executor: ProtectionClearer,
    validate: Validator | None = None,
) -> None:
    unprotect_all(stack, executor)

    logger.info("Creating %s", stack.name)
    stack.up()
    stack.refresh()
    stack.preview_expect_no_changes()

    if validate is None:
        return

    logger.info("Validating %s", stack.name)
    try:
        validate(template, stack)
    except StackOpsError:
        raise
    except Exception as exc:
        raise ValidationError(template, stack.name, exc) from exc
    logger.info("Validation succeeded for %s", stack.name)


def _teardown(run: RunContext, executor: ProtectionClearer, error: BaseException | None) -> None:
    failures = teardown_all(run.teardown_order(), executor)
    if not failures:
        return
    if error is not None:
        logger.error(
            "Teardown failed for %d stack(s) after run error (%s); leaked: %s",
            len(failures),
            error,
            ", ".join(name for name, _ in failures),
        )
        return
    raise TeardownError(failures)


def _resolve_defaults(
    options: RunOptions | None,
    executor: ProtectionClearer | None,
    settings: HarnessSettings | None,
) -> tuple[RunOptions, ProtectionClearer]:
    if options is not None and executor is not None:
        return options, executor
    settings = settings or HarnessSettings()
    if options is None:
        options = RunOptions.from_settings(settings)
    if executor is None:
        executor = StackCommandExecutor(pulumi_bin=settings.PULUMI_BIN)
    return options, executor


@contextmanager
def ephemeral_stacks(
    templates: Sequence[str],
    *,
    work_dir: str | None = None,
    id_length: int = DEFAULT_ID_LENGTH,
    config: ConfigOverride | None = None,
    options: RunOptions | None = None,
    engine: DeploymentEngine | None = None,
    executor: ProtectionClearer | None = None,
    settings: HarnessSettings | None = None,
) -> Iterator[RunContext]:
    """
    Prepare one ephemeral stack per template and guarantee their teardown.

    Each stack is recorded as soon as it is selected or created, before its
    configuration is copied, so a failure while configuring template k still
    tears down stacks 1..k. Teardown runs in reverse creation order and is
    skipped only in skip-delete mode.
    """
    options, executor = _resolve_defaults(options, executor, settings)
    engine = engine or PulumiEngine()
    run = RunContext(work_dir=work_dir or ".")

    error: BaseException | None = None
    try:
        for template in templates:
            stack_name = generate_stack_name(
                template,
                id_length=id_length,
                fixed_name=options.stack_name,
                template_count=len(templates),
            )
            stack = engine.select_or_create(stack_name, run.work_dir)
            run.record(template, stack)
            configure_stack(template, stack, config)
        yield run
    except BaseException as exc:
        error = exc
        raise
    finally:
        if options.skip_delete:
            logger.info("Skipping delete for %s", ", ".join(run.stack_names().values()))
        else:
            _teardown(run, executor, error)


def run_ephemeral_test(
    templates: Sequence[str],
    *,
    work_dir: str | None = None,
    id_length: int = DEFAULT_ID_LENGTH,
    config: ConfigOverride | None = None,
    validate: Validator | None = None,
    options: RunOptions | None = None,
    engine: DeploymentEngine | None = None,
    executor: ProtectionClearer | None = None,
    settings: HarnessSettings | None = None,
) -> RunContext:
    """Create, validate and fully delete one ephemeral stack per template."""
    options, executor = _resolve_defaults(options, executor, settings)

    with ephemeral_stacks(
        templates,
        work_dir=work_dir,
        id_length=id_length,
        config=config,
        options=options,
        engine=engine,
        executor=executor,
    ) as run:
        if options.delete_only:
            logger.info("Delete-only mode: skipping create and validate")
        else:
            for entry in run:
                apply_stack(entry.template, entry.stack, executor, validate)
    return run
