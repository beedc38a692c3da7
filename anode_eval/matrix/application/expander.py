"""Combination expander — turns the prompt × agent × iteration matrix into work items."""

from collections.abc import Sequence

from anode_eval.config.domain.agent import AgentConfig
from anode_eval.config.domain.prompt import PromptConfig
from anode_eval.config.infrastructure.errors import ConfigValidationError
from anode_eval.matrix.domain.work_item import WorkItem, make_work_id


def expand_matrix(
    run_id: str,
    prompts: Sequence[PromptConfig],
    agents: Sequence[AgentConfig],
) -> list[WorkItem]:
    """Return every work item in deterministic order.

    Prompts form the outer loop, agents the middle, iteration index (0-based)
    the inner loop, so admission order and work ids are reproducible for a
    given run id.

    Raises:
        ConfigValidationError: if either list is empty, an iteration count is
            not positive, or two entries would produce the same work id.
    """
    _validate(prompts=prompts, agents=agents)

    return [
        WorkItem(
            work_id=make_work_id(
                run_id=run_id,
                prompt_id=prompt.id,
                tool=agent.tool,
                model=agent.model,
                iteration=iteration,
            ),
            run_id=run_id,
            prompt=prompt,
            agent=agent,
            iteration=iteration,
        )
        for prompt in prompts
        for agent in agents
        for iteration in range(agent.iterations)
    ]


def expected_work_item_count(
    prompts: Sequence[PromptConfig], agents: Sequence[AgentConfig]
) -> int:
    return len(prompts) * sum(agent.iterations for agent in agents)


def _validate(prompts: Sequence[PromptConfig], agents: Sequence[AgentConfig]) -> None:
    problems: list[str] = []
    if not prompts:
        problems.append("no prompts configured")
    if not agents:
        problems.append("no agents configured")

    for agent in agents:
        # Configs built with model_construct skip field validation.
        if agent.iterations < 1:
            problems.append(
                f"agent '{agent.tool}/{agent.model}' has non-positive"
                f" iterations ({agent.iterations})"
            )

    prompt_ids = [prompt.id for prompt in prompts]
    for prompt_id in sorted({p for p in prompt_ids if prompt_ids.count(p) > 1}):
        problems.append(f"duplicate prompt id '{prompt_id}'")

    pairs = [(agent.tool, agent.model) for agent in agents]
    for tool, model in sorted({p for p in pairs if pairs.count(p) > 1}):
        problems.append(f"duplicate agent '{tool}/{model}'")

    if problems:
        raise ConfigValidationError("; ".join(problems))
