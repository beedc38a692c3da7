"""Shell scripts executed inside a sandbox."""

import shlex

from anode_eval.harness.domain.markers import TEST_OUTPUT_END, TEST_OUTPUT_START
from anode_eval.sandbox.domain.spec import SandboxSpec

AGENT_INSTALL_COMMANDS: dict[str, str] = {
    "claude_code": "npm install -g @anthropic-ai/claude-code",
    "codex": "npm install -g @openai/codex",
    "opencode": "npm install -g opencode-ai",
}


def agent_command(tool: str, model: str, prompt: str) -> str:
    """Non-interactive agent CLI invocation for one prompt."""
    quoted_model = shlex.quote(model)
    quoted_prompt = shlex.quote(prompt)
    match tool:
        case "claude_code":
            return (
                f"claude --model {quoted_model} --dangerously-skip-permissions "
                f"-p {quoted_prompt}"
            )
        case "codex":
            return f"codex exec --model {quoted_model} --full-auto {quoted_prompt}"
        case "opencode":
            return f"opencode run --model {quoted_model} {quoted_prompt}"
    raise ValueError(f"unknown agent tool: {tool!r}")


def harness_script(spec: SandboxSpec) -> str:
    """Run the harness between output markers; a failing test run is not a crash."""
    return "\n".join(
        [
            f'echo "{TEST_OUTPUT_START}"',
            f"{shlex.join(spec.test_command)} 2>&1 || true",
            f'echo "{TEST_OUTPUT_END}"',
        ]
    )


def entrypoint_script(spec: SandboxSpec, workspace: str = "/workspace") -> str:
    """Install the agent CLI, run setup, run the agent, then run the harness."""
    setup = "\n".join(spec.setup_commands) or "echo 'No setup commands'"
    return f"""#!/bin/bash
set -e

echo "=== anode-eval sandbox ==="
echo "Run ID: $ANODE_RUN_ID"
echo "Work ID: $ANODE_WORK_ID"
echo "Agent: $ANODE_AGENT_TOOL / $ANODE_MODEL (iteration $ANODE_ITERATION)"

{AGENT_INSTALL_COMMANDS[spec.tool]}

mkdir -p {shlex.quote(workspace)}
cp -r {shlex.quote(spec.eval_path)}/. {shlex.quote(workspace)}/ 2>/dev/null || true
cd {shlex.quote(workspace)}

{setup}

set +e
{agent_command(spec.tool, spec.model, spec.prompt)} 2>&1
echo "Agent exited with code $?"

{harness_script(spec)}
"""
