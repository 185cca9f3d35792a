"""End-to-end tests for the commit pipeline with fake collaborators."""

import asyncio
from dataclasses import replace

import pytest

from autocommitter.commit.failover import FailoverOrchestrator
from autocommitter.commit.pipeline import CommitPipeline, PipelineStatus
from autocommitter.llm.provider import ProviderError, ProviderId
from autocommitter.repository.file_operations import GitOperationError, PushRejectedError
from autocommitter.repository.ignore_rules import IgnoreRules
from autocommitter.version.coordinator import IncrementKind, VersionCoordinator

from helpers import FakeProvider, FakeRepository, FakeVersionStore, make_registry


def build_pipeline(settings, notifier, providers, repository=None, store=None,
                   bumping=False, ignore_rules=None):
    repository = repository or FakeRepository()
    store = store or FakeVersionStore()
    registry = make_registry(*providers, primary=settings.primary_provider,
                             backups=settings.backup_providers)
    orchestrator = FailoverOrchestrator(registry, notifier)
    coordinator = VersionCoordinator(store, enabled=bumping)
    pipeline = CommitPipeline(repository, orchestrator, coordinator, notifier, settings,
                              ignore_rules=ignore_rules)
    return pipeline, repository, store


class TestScenarios:
    @pytest.mark.asyncio
    async def test_backup_message_committed_without_version_line(self, settings, notifier):
        primary = FakeProvider(ProviderId.GEMINI, ["update code"])
        backup = FakeProvider(ProviderId.OPENROUTER, ["fix: correct off-by-one in pagination"])
        pipeline, repository, store = build_pipeline(settings, notifier, [primary, backup])

        result = await pipeline.run()

        assert result.status is PipelineStatus.COMMITTED
        assert repository.commits == ["fix: correct off-by-one in pagination"]
        assert "chore:" not in repository.commits[0]
        assert store.detect_calls == 0
        assert repository.pulls == 1 and repository.pushes == 1
        assert result.pushed

    @pytest.mark.asyncio
    async def test_all_providers_fail_no_commit(self, settings, notifier):
        primary = FakeProvider(ProviderId.GEMINI, [ProviderError(ProviderId.GEMINI, "Gemini API error: 401"), "nope"])
        backup = FakeProvider(ProviderId.OPENROUTER, [ProviderError(ProviderId.OPENROUTER, "OpenRouter API error: 502")])
        pipeline, repository, _ = build_pipeline(settings, notifier, [primary, backup])

        result = await pipeline.run()

        assert result.status is PipelineStatus.GENERATION_FAILED
        assert repository.commits == []
        # Staged but not committed
        assert repository.stage_calls == 1
        assert repository.pulls == 0

        assert len(result.attempts) == 3
        details = notifier.last_attempt_details
        for attempt in result.attempts:
            assert attempt.error in details
        assert any(n.level == "warning" and "Skipping commit" in n.message for n in notifier.history)

    @pytest.mark.asyncio
    async def test_version_bump_appended_last(self, settings, notifier):
        settings = replace(settings, version_bumping_enabled=True, version_increment=IncrementKind.MINOR)
        primary = FakeProvider(ProviderId.GEMINI, ["feat: add retry logic"])
        pipeline, repository, store = build_pipeline(
            settings, notifier, [primary], store=FakeVersionStore("2.0.0"), bumping=True
        )

        result = await pipeline.run()

        assert result.status is PipelineStatus.COMMITTED
        assert repository.commits == ["feat: add retry logic\n\nchore: bump version to 2.1.0"]
        assert result.version == "2.1.0"
        assert store.writes == ["2.1.0"]
        # Restaged so the version file is part of the commit
        assert repository.stage_calls == 2

    @pytest.mark.asyncio
    async def test_failed_bump_still_commits(self, settings, notifier):
        primary = FakeProvider(ProviderId.GEMINI, ["feat: add retry logic"])
        pipeline, repository, _ = build_pipeline(
            settings, notifier, [primary], store=FakeVersionStore("not-a-version"), bumping=True
        )

        result = await pipeline.run()

        assert result.status is PipelineStatus.COMMITTED
        assert repository.commits == ["feat: add retry logic"]
        assert result.version is None


class TestEarlyReturns:
    @pytest.mark.asyncio
    async def test_clean_tree_has_no_side_effects(self, settings, notifier):
        primary = FakeProvider(ProviderId.GEMINI, ["feat: add retry logic"])
        pipeline, repository, _ = build_pipeline(
            settings, notifier, [primary], repository=FakeRepository(changed=[])
        )

        result = await pipeline.run()

        assert result.status is PipelineStatus.NO_CHANGES
        assert repository.stage_calls == 0
        assert not primary.calls

    @pytest.mark.asyncio
    async def test_empty_diff_skips_generation(self, settings, notifier):
        primary = FakeProvider(ProviderId.GEMINI, ["feat: add retry logic"])
        pipeline, repository, _ = build_pipeline(
            settings, notifier, [primary], repository=FakeRepository(diff="")
        )

        result = await pipeline.run()

        assert result.status is PipelineStatus.NO_CHANGES
        assert repository.stage_calls == 1
        assert not primary.calls

    @pytest.mark.asyncio
    async def test_only_version_files_changed(self, settings, notifier):
        primary = FakeProvider(ProviderId.GEMINI, ["chore: bump version"])
        repository = FakeRepository(changed=["package.json", "package-lock.json", ".gitignore"])
        pipeline, repository, _ = build_pipeline(settings, notifier, [primary], repository=repository)

        result = await pipeline.run()

        assert result.status is PipelineStatus.SKIPPED_VERSION_ONLY
        assert repository.stage_calls == 0
        assert not primary.calls

    @pytest.mark.asyncio
    async def test_no_provider_configured(self, settings, notifier):
        settings = replace(settings, primary_provider=None, backup_providers=[])
        primary = FakeProvider(ProviderId.GEMINI, ["feat: add retry logic"])
        pipeline, repository, _ = build_pipeline(settings, notifier, [primary])

        result = await pipeline.run()

        assert result.status is PipelineStatus.GENERATION_FAILED
        assert result.attempts == []
        assert repository.commits == []
        assert not primary.calls


class TestGitFailures:
    @pytest.mark.asyncio
    async def test_pull_conflict_keeps_local_commit(self, settings, notifier):
        primary = FakeProvider(ProviderId.GEMINI, ["fix: handle empty pagination cursor"])
        repository = FakeRepository(conflicted=["src/app.py"])
        pipeline, repository, _ = build_pipeline(settings, notifier, [primary], repository=repository)

        result = await pipeline.run()

        assert result.status is PipelineStatus.PULL_CONFLICT
        assert result.committed
        assert result.conflicted_paths == ["src/app.py"]
        assert repository.commits == ["fix: handle empty pagination cursor"]
        assert repository.pushes == 0
        assert "src/app.py" in notifier.history[-1].message

    @pytest.mark.asyncio
    async def test_push_rejection_is_reported_not_retried(self, settings, notifier):
        primary = FakeProvider(ProviderId.GEMINI, ["fix: handle empty pagination cursor"])
        repository = FakeRepository(push_error=PushRejectedError("remote branch has new commits"))
        pipeline, repository, _ = build_pipeline(settings, notifier, [primary], repository=repository)

        result = await pipeline.run()

        assert result.status is PipelineStatus.PUSH_REJECTED
        assert result.committed
        assert repository.pushes == 1
        assert notifier.history[-1].level == "error"

    @pytest.mark.asyncio
    async def test_other_push_error(self, settings, notifier):
        primary = FakeProvider(ProviderId.GEMINI, ["fix: handle empty pagination cursor"])
        repository = FakeRepository(push_error=GitOperationError("Push failed: auth"))
        pipeline, repository, _ = build_pipeline(settings, notifier, [primary], repository=repository)

        result = await pipeline.run()

        assert result.status is PipelineStatus.SYNC_FAILED
        assert result.committed

    @pytest.mark.asyncio
    async def test_commit_failure_aborts(self, settings, notifier):
        primary = FakeProvider(ProviderId.GEMINI, ["fix: handle empty pagination cursor"])
        repository = FakeRepository(commit_error=GitOperationError("pre-commit hook failed"))
        pipeline, repository, _ = build_pipeline(settings, notifier, [primary], repository=repository)

        result = await pipeline.run()

        assert result.status is PipelineStatus.COMMIT_FAILED
        assert not result.committed
        assert repository.pulls == 0
        assert "pre-commit hook failed" in notifier.history[-1].message

    @pytest.mark.asyncio
    async def test_commit_failure_restores_bumped_version(self, settings, notifier):
        settings = replace(settings, version_bumping_enabled=True)
        primary = FakeProvider(ProviderId.GEMINI, ["fix: handle empty pagination cursor"] * 2)
        repository = FakeRepository(commit_error=GitOperationError("pre-commit hook failed"))
        store = FakeVersionStore("1.2.3")
        pipeline, repository, store = build_pipeline(
            settings, notifier, [primary], repository=repository, store=store, bumping=True
        )

        result = await pipeline.run()

        assert result.status is PipelineStatus.COMMIT_FAILED
        assert result.version is None
        assert store.writes == ["1.2.4", "1.2.3"]
        assert "version bump to 1.2.4 reverted" in notifier.history[-1].message

        # The next successful run commits the same version number
        repository.commit_error = None
        result = await pipeline.run()

        assert result.version == "1.2.4"
        assert repository.commits == ["fix: handle empty pagination cursor\n\nchore: bump version to 1.2.4"]

    @pytest.mark.asyncio
    async def test_auto_push_disabled(self, settings, notifier):
        settings = replace(settings, auto_push=False)
        primary = FakeProvider(ProviderId.GEMINI, ["fix: handle empty pagination cursor"])
        pipeline, repository, _ = build_pipeline(settings, notifier, [primary])

        result = await pipeline.run()

        assert result.status is PipelineStatus.COMMITTED
        assert repository.pulls == 0 and repository.pushes == 0
        assert not result.pushed

    @pytest.mark.asyncio
    async def test_no_remote_skips_sync(self, settings, notifier):
        primary = FakeProvider(ProviderId.GEMINI, ["fix: handle empty pagination cursor"])
        pipeline, repository, _ = build_pipeline(
            settings, notifier, [primary], repository=FakeRepository(has_remote=False)
        )

        result = await pipeline.run()

        assert result.status is PipelineStatus.COMMITTED
        assert repository.pulls == 0


class TestIgnoreRules:
    @pytest.mark.asyncio
    async def test_smart_gitignore_force_adds_attributed_patterns(self, tmp_path, settings, notifier):
        (tmp_path / ".gitattributes").write_text("*.lock binary\n")
        settings = replace(settings, smart_gitignore=True)
        rules = IgnoreRules(tmp_path, gitattributes_patterns=["dist/*.js"])
        primary = FakeProvider(ProviderId.GEMINI, ["build: ship compiled bundle"])
        pipeline, repository, _ = build_pipeline(settings, notifier, [primary], ignore_rules=rules)

        await pipeline.run()

        assert repository.force_added == [["dist/*.js", "*.lock"]]
        assert "dist/*.js" in (tmp_path / ".gitattributes").read_text()

    @pytest.mark.asyncio
    async def test_smart_gitignore_off_does_not_force_add(self, tmp_path, settings, notifier):
        rules = IgnoreRules(tmp_path, gitattributes_patterns=["dist/*.js"])
        primary = FakeProvider(ProviderId.GEMINI, ["build: ship compiled bundle"])
        pipeline, repository, _ = build_pipeline(settings, notifier, [primary], ignore_rules=rules)

        await pipeline.run()

        assert repository.force_added == []

    @pytest.mark.asyncio
    async def test_unreadable_gitignore_does_not_abort_run(self, tmp_path, settings, notifier):
        (tmp_path / ".gitignore").write_bytes(b"\xff\xfe*.log\n")
        rules = IgnoreRules(tmp_path, ignored_patterns=["*.log"], gitattributes_patterns=["*.lock"])
        primary = FakeProvider(ProviderId.GEMINI, ["fix: handle empty pagination cursor"])
        pipeline, repository, _ = build_pipeline(settings, notifier, [primary], ignore_rules=rules)

        result = await pipeline.run()

        assert result.status is PipelineStatus.COMMITTED
        assert repository.commits == ["fix: handle empty pagination cursor"]
        # The other file is still maintained
        assert "*.lock" in (tmp_path / ".gitattributes").read_text()

    @pytest.mark.asyncio
    async def test_unreadable_gitattributes_skips_force_add(self, tmp_path, settings, notifier):
        (tmp_path / ".gitattributes").write_bytes(b"\xff\xfe*.png binary\n")
        settings = replace(settings, smart_gitignore=True)
        rules = IgnoreRules(tmp_path, ignored_patterns=["*.tmp"])
        primary = FakeProvider(ProviderId.GEMINI, ["fix: handle empty pagination cursor"])
        pipeline, repository, _ = build_pipeline(settings, notifier, [primary], ignore_rules=rules)

        result = await pipeline.run()

        assert result.status is PipelineStatus.COMMITTED
        assert repository.force_added == []


class TestOverlappingRuns:
    @pytest.mark.asyncio
    async def test_serialized_run_skips_while_busy(self, settings, notifier):
        gate = asyncio.Event()
        primary = FakeProvider(ProviderId.GEMINI, ["feat: add retry logic"], gate=gate)
        pipeline, repository, _ = build_pipeline(settings, notifier, [primary])

        first = asyncio.ensure_future(pipeline.run())
        await primary.called.wait()
        assert pipeline.running

        second = await pipeline.run()
        assert second.status is PipelineStatus.SKIPPED_BUSY

        gate.set()
        assert (await first).status is PipelineStatus.COMMITTED
        assert repository.commits == ["feat: add retry logic"]
        assert not pipeline.running

    @pytest.mark.asyncio
    async def test_unserialized_runs_overlap_with_single_bump(self, settings, notifier):
        settings = replace(settings, serialize_runs=False, version_bumping_enabled=True)
        gate = asyncio.Event()
        store = FakeVersionStore("1.0.0", gate=gate)
        primary = FakeProvider(ProviderId.GEMINI, ["feat: add retry logic", "fix: handle empty pagination cursor"])
        pipeline, repository, _ = build_pipeline(settings, notifier, [primary], store=store, bumping=True)

        first = asyncio.ensure_future(pipeline.run())
        await store.write_started.wait()

        # The second run overlaps; its bump is refused by the in-progress flag
        second = await pipeline.run()
        assert second.status is PipelineStatus.COMMITTED
        assert second.version is None

        gate.set()
        first_result = await first

        assert first_result.version == "1.0.1"
        assert store.writes == ["1.0.1"]
        assert repository.commits == [
            "fix: handle empty pagination cursor",
            "feat: add retry logic\n\nchore: bump version to 1.0.1",
        ]
