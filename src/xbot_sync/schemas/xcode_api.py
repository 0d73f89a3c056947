"""Pydantic schemas for the Xcode Server API.

Covers bots, integrations and the bot configuration sent when a
new bot is created for a pull request.
"""

import base64
import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Xcode Server schedule type: integrate on every commit to the branch
SCHEDULE_ON_COMMIT = 2

# Blueprint constants understood by Xcode Server
_GIT_SYSTEM = "com.apple.dt.Xcode.sourcecontrol.Git"
_SSH_AUTH_STRATEGY = "DVTSourceControlSSHKeysAuthenticationStrategy"
_BLUEPRINT_VERSION = 204


class BotRecord(BaseModel):
    """Bot document as returned by GET /bots."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id", description="Bot identifier")
    rev: str = Field(alias="_rev", description="Document revision, required to delete")
    name: str = Field(description="Bot name")


class BuildResultSummary(BaseModel):
    """Counts reported for a finished integration."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    error_count: int = Field(default=0, alias="errorCount")
    warning_count: int = Field(default=0, alias="warningCount")
    analyzer_warning_count: int = Field(default=0, alias="analyzerWarningCount")
    tests_count: int = Field(default=0, alias="testsCount")
    test_failure_count: int = Field(default=0, alias="testFailureCount")


class Integration(BaseModel):
    """Snapshot of one bot integration.

    Frozen: a fetched integration never changes, a newer state
    requires fetching again.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    id: str | None = Field(default=None, alias="_id")
    number: int = Field(description="Integration sequence number")
    current_step: str = Field(default="pending", alias="currentStep")
    result: str = Field(default="unknown", description="Raw result text")
    build_result_summary: BuildResultSummary | None = Field(
        default=None, alias="buildResultSummary"
    )
    summary_text: str | None = Field(
        default=None,
        alias="summary",
        description="Preformatted summary, takes precedence over the rendered one",
    )

    @property
    def summary(self) -> str:
        """Human-readable summary posted as a PR comment."""
        if self.summary_text:
            return self.summary_text

        lines = [f"Integration #{self.number}: {self.result}"]
        counts = self.build_result_summary
        if counts is not None:
            if counts.tests_count:
                passed = counts.tests_count - counts.test_failure_count
                lines.append(f"Tests: {passed}/{counts.tests_count} passed")
            lines.append(f"Errors: {counts.error_count}")
            lines.append(f"Warnings: {counts.warning_count}")
            lines.append(f"Analyzer warnings: {counts.analyzer_warning_count}")
        return "\n".join(lines)


class BotConfigTemplate(BaseModel):
    """Shared fields applied to every bot created from a pull request."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    project_or_workspace: str = Field(
        alias="projectOrWorkspace",
        description="Path of the .xcodeproj/.xcworkspace relative to the repo root",
    )
    scheme_name: str = Field(alias="schemeName", description="Scheme to build")
    public_key: str = Field(alias="publicKey", description="SSH public key for git")
    private_key: str = Field(alias="privateKey", description="SSH private key for git")
    device_ids: list[str] = Field(
        default_factory=list, alias="deviceIds", description="Target device identifiers"
    )
    performs_test_action: bool = Field(default=True, alias="performsTestAction")
    performs_analyze_action: bool = Field(default=False, alias="performsAnalyzeAction")
    performs_archive_action: bool = Field(default=False, alias="performsArchiveAction")


class BotConfiguration(BaseModel):
    """Complete configuration for a new bot.

    Built by overlaying per-PR fields (name, branch, git URL) on a
    BotConfigTemplate.
    """

    name: str
    branch: str
    git_url: str
    template: BotConfigTemplate

    @classmethod
    def from_template(
        cls,
        template: BotConfigTemplate,
        *,
        name: str,
        branch: str,
        git_url: str,
    ) -> "BotConfiguration":
        """Factory method overlaying per-PR fields on the shared template."""
        return cls(name=name, branch=branch, git_url=git_url, template=template)

    def to_payload(self) -> dict[str, Any]:
        """Render the POST /bots request body."""
        t = self.template
        repo_id = str(uuid.uuid5(uuid.NAMESPACE_URL, self.git_url)).upper()
        blueprint = {
            "DVTSourceControlWorkspaceBlueprintIdentifierKey": str(
                uuid.uuid5(uuid.NAMESPACE_URL, f"{self.git_url}#{self.branch}")
            ).upper(),
            "DVTSourceControlWorkspaceBlueprintNameKey": self.name,
            "DVTSourceControlWorkspaceBlueprintVersion": _BLUEPRINT_VERSION,
            "DVTSourceControlWorkspaceBlueprintRelativePathToProjectKey": t.project_or_workspace,
            "DVTSourceControlWorkspaceBlueprintPrimaryRemoteRepositoryKey": repo_id,
            "DVTSourceControlWorkspaceBlueprintRemoteRepositoriesKey": [
                {
                    "DVTSourceControlWorkspaceBlueprintRemoteRepositoryURLKey": self.git_url,
                    "DVTSourceControlWorkspaceBlueprintRemoteRepositorySystemKey": _GIT_SYSTEM,
                    "DVTSourceControlWorkspaceBlueprintRemoteRepositoryIdentifierKey": repo_id,
                }
            ],
            "DVTSourceControlWorkspaceBlueprintLocationsKey": {
                repo_id: {
                    "DVTSourceControlBranchIdentifierKey": self.branch,
                    "DVTSourceControlWorkspaceBlueprintLocationTypeKey": "DVTSourceControlBranch",
                }
            },
            "DVTSourceControlWorkspaceBlueprintRemoteRepositoryAuthenticationStrategiesKey": {
                repo_id: {
                    "DVTSourceControlWorkspaceBlueprintRemoteRepositoryAuthenticationTypeKey": (
                        _SSH_AUTH_STRATEGY
                    ),
                    "DVTSourceControlWorkspaceBlueprintRemoteRepositoryUsernameKey": "git",
                    "DVTSourceControlWorkspaceBlueprintRemoteRepositoryPublicKeyDataKey": _b64(
                        t.public_key
                    ),
                    "DVTSourceControlWorkspaceBlueprintRemoteRepositoryPrivateKeyDataKey": _b64(
                        t.private_key
                    ),
                }
            },
        }
        return {
            "name": self.name,
            "type": 1,
            "requiresUpgrade": False,
            "configuration": {
                "schemeName": t.scheme_name,
                "builtFromClean": 0,
                "scheduleType": SCHEDULE_ON_COMMIT,
                "performsTestAction": t.performs_test_action,
                "performsAnalyzeAction": t.performs_analyze_action,
                "performsArchiveAction": t.performs_archive_action,
                "deviceSpecification": {"deviceIdentifiers": list(t.device_ids)},
                "sourceControlBlueprint": blueprint,
            },
        }


def _b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")
