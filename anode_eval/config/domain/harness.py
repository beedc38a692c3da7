"""Test harness configuration models — discriminated union on `type` field."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class CargoHarness(BaseModel, frozen=True):
    """Rust `cargo test`."""

    type: Literal["cargo"] = "cargo"
    features: list[str] = Field(default_factory=list)
    release: bool = False

    def test_command(self) -> list[str]:
        command = ["cargo", "test"]
        if self.features:
            command += ["--features", ",".join(self.features)]
        if self.release:
            command.append("--release")
        return command


class NpmHarness(BaseModel, frozen=True):
    """Node.js `npm run <script>`."""

    type: Literal["npm"] = "npm"
    script: str = Field(default="test", min_length=1)

    def test_command(self) -> list[str]:
        return ["npm", "run", self.script]


class PytestHarness(BaseModel, frozen=True):
    """Python pytest in verbose mode so per-test outcomes can be counted."""

    type: Literal["pytest"] = "pytest"
    args: list[str] = Field(default_factory=list)

    def test_command(self) -> list[str]:
        return ["pytest", "-v", "--tb=short", *self.args]


class GoHarness(BaseModel, frozen=True):
    """`go test -v <package>`."""

    type: Literal["go"] = "go"
    package: str = Field(default="./...", min_length=1)

    def test_command(self) -> list[str]:
        return ["go", "test", "-v", self.package]


class CustomHarness(BaseModel, frozen=True):
    """Arbitrary command whose output carries a recognisable test summary."""

    type: Literal["custom"] = "custom"
    command: str = Field(min_length=1)
    args: list[str] = Field(default_factory=list)

    def test_command(self) -> list[str]:
        return [self.command, *self.args]


# Pydantic selects the variant from the `type` field.
type TestHarness = Annotated[
    CargoHarness | NpmHarness | PytestHarness | GoHarness | CustomHarness,
    Field(discriminator="type"),
]
