"""
Tests for the CLI.

CRITICAL TESTS:
1. test_request_connect - prints the exact Connect frame
2. test_decode_json - decodes a response frame to JSON records
3. test_decode_unknown_type - unknown types exit with code 2 unless skipped
"""

import json

import pytest
from typer.testing import CliRunner

from tdx_wire import __version__
from tdx_wire.cli.main import EXIT_CODEC_ERROR, EXIT_UNKNOWN_TYPE, app
from tdx_wire.formats.frame import build_response
from tdx_wire.formats.message_types import MessageType
from tdx_wire.messages.records import StockCode
from tdx_wire.testing import build_code_list_payload, build_count_payload


def _hex(data: bytes) -> str:
    return ' '.join(f'{b:02X}' for b in data)


def _compact(text: str) -> str:
    return ''.join(text.split())


def _json(result):
    """JSON document in the output, after any log lines."""
    return json.loads(result.stdout[result.stdout.index("{"):])


@pytest.fixture
def runner():
    return CliRunner()


class TestVersion:

    def test_version(self, runner):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestConfig:

    def test_config_init(self, runner):
        result = runner.invoke(app, ["config", "init"])
        assert result.exit_code == 0
        assert "codec:" in result.stdout
        assert "kline_page_size: 800" in result.stdout

    def test_config_validate_valid(self, runner, tmp_path):
        path = tmp_path / "tdx.yml"
        path.write_text("codec:\n  on_unknown_type: skip\n")
        result = runner.invoke(app, ["config", "validate", str(path)])
        assert result.exit_code == 0
        assert "Valid" in result.stdout

    def test_config_validate_invalid(self, runner, tmp_path):
        path = tmp_path / "tdx.yml"
        path.write_text("session:\n  kline_page_size: 5000\n")
        result = runner.invoke(app, ["config", "validate", str(path)])
        assert result.exit_code == 1
        assert "kline_page_size" in result.stdout

    def test_config_unknown_action(self, runner):
        result = runner.invoke(app, ["config", "explode"])
        assert result.exit_code == 1


class TestRequest:

    def test_request_connect(self, runner):
        result = runner.invoke(app, ["request", "connect"])
        assert result.exit_code == 0
        assert _compact(result.stdout) == "0C0100000001030003000D0001"

    def test_request_count_with_msg_id(self, runner):
        result = runner.invoke(app, ["request", "count", "--exchange", "sh", "--msg-id", "5"])
        assert result.exit_code == 0
        assert _compact(result.stdout) == _compact(
            "0C 05000000 01 0800 0800 4E04 0100 75C73301"
        )

    def test_request_kline(self, runner):
        result = runner.invoke(app, [
            "request", "kline", "--code", "sz000001", "--kline-type", "minute5", "--count", "10",
        ])
        assert result.exit_code == 0
        frame = bytes.fromhex(_compact(result.stdout))
        assert frame[10:12] == b'\x2D\x05'
        assert frame[12 + 8] == 0

    def test_request_missing_code(self, runner):
        result = runner.invoke(app, ["request", "kline"])
        assert result.exit_code == EXIT_CODEC_ERROR
        assert "--code" in result.stdout

    def test_request_unknown_kind(self, runner):
        result = runner.invoke(app, ["request", "orderbook"])
        assert result.exit_code == EXIT_UNKNOWN_TYPE

    def test_request_codec_error(self, runner):
        result = runner.invoke(app, ["request", "kline", "--code", "sz000001", "--count", "900"])
        assert result.exit_code == EXIT_CODEC_ERROR
        assert "E5002" in result.stdout


class TestDecode:

    def test_decode_json(self, runner):
        codes = [StockCode('000001', 'PAYH', 100, 2, 10.5)]
        frame = build_response(MessageType.CODE_LIST, build_code_list_payload(codes),
                               msg_id=7, compress=True)
        result = runner.invoke(app, ["decode", _hex(frame), "--json"])
        assert result.exit_code == 0

        output = _json(result)
        assert output['type'] == 'CODE_LIST'
        assert output['msg_id'] == 7
        assert output['known'] is True
        assert output['records']['count'] == 1
        assert output['records']['items'][0]['name'] == 'PAYH'

    def test_decode_table(self, runner):
        frame = build_response(MessageType.COUNT, build_count_payload(1000), msg_id=1)
        result = runner.invoke(app, ["decode", _hex(frame)])
        assert result.exit_code == 0
        assert "COUNT" in result.stdout
        assert "1000" in result.stdout

    def test_decode_unknown_type(self, runner):
        frame = build_response(0x9999, b'\x01', msg_id=1)
        result = runner.invoke(app, ["decode", _hex(frame)])
        assert result.exit_code == EXIT_UNKNOWN_TYPE
        assert "E3001" in result.stdout

        result = runner.invoke(app, ["decode", _hex(frame), "--skip-unknown", "--json"])
        assert result.exit_code == 0
        assert _json(result)['known'] is False

    def test_decode_bad_frame(self, runner):
        result = runner.invoke(app, ["decode", "B1 CB 74"])
        assert result.exit_code == EXIT_CODEC_ERROR
        assert "E1002" in result.stdout

    def test_decode_invalid_hex(self, runner):
        result = runner.invoke(app, ["decode", "ZZ"])
        assert result.exit_code == EXIT_CODEC_ERROR


class TestFixture:

    def test_fixture_ok(self, runner, tmp_path):
        response = build_response(MessageType.COUNT, build_count_payload(456), msg_id=3)
        path = tmp_path / "count.json"
        path.write_text(json.dumps({
            'name': 'count',
            'type': 'TypeCount',
            'type_value': '0x044E',
            'request': '0C 03 00 00 00 01 08 00 08 00 4E 04 00 00 75 C7 33 01',
            'request_data': '00 00 75 C7 33 01',
            'response': _hex(response),
            'response_data': 'C8 01',
        }))
        result = runner.invoke(app, ["fixture", str(path)])
        assert result.exit_code == 0
        assert "response 2 bytes decoded" in result.stdout

    def test_fixture_payload_mismatch(self, runner, tmp_path):
        path = tmp_path / "count.json"
        path.write_text(json.dumps({
            'name': 'count',
            'type_value': '0x044E',
            'request': '0C 03 00 00 00 01 08 00 08 00 4E 04 00 00 75 C7 33 01',
            'request_data': '01 00 75 C7 33 01',
            'response': '[elided]',
        }))
        result = runner.invoke(app, ["fixture", str(path)])
        assert result.exit_code == EXIT_CODEC_ERROR
