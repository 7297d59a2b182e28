"""
Tests for request context construction.
"""

import pytest

from mcp_conductor.core.context import ContextBuilder, calculate_complexity, to_snake_case


REACT_FILES = ["package.json", "src/App.tsx", "src/index.tsx", "public/index.html"]
SPRING_FILES = [
    "pom.xml",
    "src/main/java/com/acme/App.java",
    "src/main/resources/application.properties",
]


class TestHelpers:

    @pytest.mark.parametrize("key,expected", [
        ("projectType", "project_type"),
        ("isComplexTask", "is_complex_task"),
        ("files", "files"),
        ("file_count", "file_count"),
    ])
    def test_to_snake_case(self, key, expected):
        assert to_snake_case(key) == expected

    def test_complexity_empty(self):
        assert calculate_complexity([]) == 0.0

    def test_complexity_components(self):
        files = ["src/config/settings.py", "tests/test_app.py", "README.md"]
        # size 0.03 + depth 0.2 + extensions 0.2 + special files 0.1
        assert calculate_complexity(files) == pytest.approx(0.53)

    def test_complexity_is_capped(self):
        files = [f"a/b/c/d/e/f/g/h/i/j/k/config{n}.ext{n}" for n in range(200)]
        assert calculate_complexity(files) == 1.0


class TestProfileDetection:
    """Test project profile detection from file indicators."""

    def test_react(self, context_builder):
        assert context_builder.detect_profile(REACT_FILES) == "react"

    def test_spring_boot(self, context_builder):
        assert context_builder.detect_profile(SPRING_FILES) == "spring-boot"

    def test_database_heavy(self, context_builder):
        assert context_builder.detect_profile(["db/schema.sql", "migrations/001_init.sql"]) == "database-heavy"

    def test_no_match(self, context_builder):
        assert context_builder.detect_profile(["main.rs"]) == "general"
        assert context_builder.detect_profile([]) == "general"


class TestContextBuilder:
    """Test merging explicit and derived context values."""

    def test_empty(self, context_builder):
        ctx = context_builder.build("")

        assert ctx.files == ()
        assert ctx.project_profile == "general"
        assert ctx.project_type is None
        assert ctx.project_complexity == 0.0
        assert ctx.task_type == "general"

    def test_derived_from_files(self, context_builder):
        ctx = context_builder.build("build the page", {"files": REACT_FILES})

        assert ctx.files == tuple(REACT_FILES)
        assert ctx.file_count == 4
        assert ctx.project_profile == "react"
        assert ctx.project_type == "react"
        assert ctx.project_complexity > 0

    def test_explicit_values_win(self, context_builder):
        ctx = context_builder.build("hello", {
            "files": REACT_FILES,
            "projectType": "coding",
            "fileCount": 500,
            "isComplexTask": 1,
            "theme": "dark",
        })

        assert ctx.project_type == "coding"
        assert ctx.project_profile == "react"
        assert ctx.file_count == 500
        assert ctx.is_large_project is True
        assert ctx.is_complex_task is True
        assert ctx.extras == {"theme": "dark"}

    def test_snake_case_keys(self, context_builder):
        ctx = context_builder.build("hello", {"needs_file_operations": True})
        assert ctx.needs_file_operations is True

    def test_database_files(self, context_builder):
        ctx = context_builder.build("", {"files": ["db/schema.sql", "migrations/001_init.sql"]})

        assert ctx.has_database_files is True
        assert ctx.task_type == "database"
        assert ctx.is_database_task is True

    @pytest.mark.parametrize("files,expected", [
        ([".git/config"], True),
        ([".github/workflows/ci.yml"], True),
        (["src/.gitignore"], False),
        (["src/app.py"], False),
    ])
    def test_git_files(self, context_builder, files, expected):
        assert context_builder.build("", {"files": files}).has_git_files is expected

    def test_non_list_files_ignored(self, context_builder):
        ctx = context_builder.build("", {"files": "src/app.py"})
        assert ctx.files == ()

    def test_windows_paths_normalized(self, context_builder):
        ctx = context_builder.build("", {"files": ["src\\main\\java\\App.java"]})
        assert ctx.files == ("src/main/java/App.java",)


class TestTaskType:
    """Test task type analysis and the derived flags."""

    @pytest.mark.parametrize("text,task_type,flag", [
        ("analyze the logs", "analysis", "is_analysis_task"),
        ("debug the sql migration", "analysis", "is_analysis_task"),
        ("slow sql in reports", "database", "is_database_task"),
        ("git commit message", "version_control", "is_version_control_task"),
        ("쿼리 튜닝", "database", "is_database_task"),
    ])
    def test_task_flags(self, context_builder, text, task_type, flag):
        ctx = context_builder.build(text)

        assert ctx.task_type == task_type
        assert getattr(ctx, flag) is True

    def test_development_has_no_flag(self, context_builder):
        ctx = context_builder.build("implement login")

        assert ctx.task_type == "development"
        assert not ctx.is_analysis_task
        assert not ctx.is_database_task

    def test_profile_task_type(self):
        assert ContextBuilder.analyze_task_type("", "documentation") == "documentation"
        assert ContextBuilder.analyze_task_type("", "react") == "general"
