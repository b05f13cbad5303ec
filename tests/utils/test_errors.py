from voiceflow.utils.errors import (
    BuildToolsMissing,
    Cancelled,
    CommandTimeout,
    FileSystemError,
    NetworkError,
    NonZeroExit,
    VoiceflowError,
)


def test_every_error_is_a_voiceflow_error():
    for error in (
        Cancelled(),
        CommandTimeout("cmake --build build", 600),
        NetworkError("offline"),
        NonZeroExit("git clone", 128),
        FileSystemError("read-only"),
        BuildToolsMissing(["cmake"]),
    ):
        assert isinstance(error, VoiceflowError)


def test_default_suggestions_apply_unless_overridden():
    assert NetworkError("offline").suggestion
    assert NetworkError("offline", suggestion="retry later").suggestion == "retry later"
    assert Cancelled().suggestion is None


def test_non_zero_exit_message():
    assert str(NonZeroExit("git clone", 128, "fatal: repository not found\n")) == \
        "'git clone' failed: fatal: repository not found"
    assert str(NonZeroExit("make", 2)) == "'make' failed: exit code 2"


def test_command_timeout_message():
    error = CommandTimeout("cmake --build build", 600)
    assert "600s" in error.message
    assert error.timeout == 600


def test_build_tools_missing_lists_tools():
    error = BuildToolsMissing(["git", "gcc/clang"])
    assert error.missing == ["git", "gcc/clang"]
    assert "git, gcc/clang" in error.message
