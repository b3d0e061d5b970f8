import pytest

from gwencat.__main__ import _build_parser
from gwencat.config import Role, TransferConfig, UsageError, resolve_role


def test_existing_path_resolves_to_send(tmp_path):
    path = tmp_path / "present.txt"
    path.write_text("hi")
    assert resolve_role(path) is Role.SEND


def test_missing_path_resolves_to_receive(tmp_path):
    assert resolve_role(tmp_path / "absent.txt") is Role.RECEIVE


def test_explicit_mode_wins(tmp_path):
    path = tmp_path / "present.txt"
    path.write_text("hi")
    assert resolve_role(path, "receive") is Role.RECEIVE
    assert resolve_role(tmp_path / "absent", "SEND") is Role.SEND


def test_invalid_mode(tmp_path):
    with pytest.raises(UsageError):
        resolve_role(tmp_path, "upload")


def test_send_requires_remote_and_port(tmp_path):
    with pytest.raises(UsageError, match="Send mode"):
        TransferConfig(path=tmp_path / "f", role=Role.SEND, port=4444).validate()
    with pytest.raises(UsageError, match="Send mode"):
        TransferConfig(path=tmp_path / "f", role=Role.SEND, remote="10.0.0.1").validate()


def test_receive_requires_port(tmp_path):
    with pytest.raises(UsageError, match="Receive mode"):
        TransferConfig(path=tmp_path / "f", role=Role.RECEIVE).validate()


def test_receive_filter_is_optional(tmp_path):
    TransferConfig(path=tmp_path / "f", role=Role.RECEIVE, port=4444).validate()


@pytest.mark.parametrize("port", [-1, 65536])
def test_port_range(tmp_path, port):
    with pytest.raises(UsageError, match="Port"):
        TransferConfig(path=tmp_path / "f", role=Role.RECEIVE, port=port).validate()


def test_timeout_must_be_positive(tmp_path):
    with pytest.raises(UsageError, match="Timeout"):
        TransferConfig(path=tmp_path / "f", role=Role.RECEIVE, port=1, timeout=0).validate()


def test_deadline_is_ten_times_timeout(tmp_path):
    config = TransferConfig(path=tmp_path / "f", role=Role.RECEIVE, port=1, timeout=3)
    assert config.deadline == 30


def test_from_args_auto_detects_receive(tmp_path):
    dest = tmp_path / "incoming.bin"
    args = _build_parser().parse_args(["-p", "4444", "-v", "--progress", str(dest)])
    config = TransferConfig.from_args(args)
    assert config.role is Role.RECEIVE
    assert config.port == 4444
    assert config.verify and config.progress
    assert config.timeout == 30
    assert config.algorithm == "sha256"


def test_from_args_accepts_single_dash_long_flags(tmp_path):
    src = tmp_path / "out.bin"
    src.write_bytes(b"1")
    args = _build_parser().parse_args(
        ["-mode", "send", "-r", "10.1.2.3", "-p", "9", "-progress", str(src)]
    )
    config = TransferConfig.from_args(args)
    assert config.role is Role.SEND
    assert config.remote == "10.1.2.3"
    assert config.progress


def test_from_args_rejects_send_without_remote(tmp_path):
    src = tmp_path / "out.bin"
    src.write_bytes(b"1")
    args = _build_parser().parse_args(["-p", "9", str(src)])
    with pytest.raises(UsageError):
        TransferConfig.from_args(args)


@pytest.mark.parametrize("timeout", [float("nan"), float("inf"), 1e300])
def test_timeout_must_be_finite(tmp_path, timeout):
    with pytest.raises(UsageError, match="Timeout"):
        TransferConfig(path=tmp_path / "f", role=Role.RECEIVE, port=1, timeout=timeout).validate()
