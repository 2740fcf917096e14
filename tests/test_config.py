"""
Tests for configuration loading and validation.
"""

from pathlib import Path

import pytest

from penguin_exporter.collectors import Factories
from penguin_exporter.config import (
    ConfigError,
    ConfigLoader,
    LexerError,
    ParseError,
    TokenType,
    load_config,
    tokenize,
)
from penguin_exporter.config.parser import parse_config
from penguin_exporter.config.schema import Config


def test_load_example_config(example_config_path: Path) -> None:
    """Test that example config loads without errors."""
    loader = ConfigLoader()

    config = loader.load(str(example_config_path))

    assert isinstance(config, Config)
    assert config.web.port == 9100
    assert config.paths.sysfs == "/sys"
    assert config.collectors.names == ["edac", "stat"]
    assert config.edac.csrows is True
    assert config.stat.source == "auto"


def test_validate_example_config(example_config_path: Path) -> None:
    """Test that example config validates without warnings."""
    loader = ConfigLoader()
    config = loader.load(str(example_config_path))

    assert loader.validate(config, known_collectors=set(Factories)) == []


def test_load_alias_matches_load_file(example_config_path: Path) -> None:
    loader = ConfigLoader()

    via_alias = loader.load(str(example_config_path))
    via_direct = loader.load_file(str(example_config_path))

    assert via_alias == via_direct


def test_defaults() -> None:
    """No configuration file means every collector on the default port."""
    config = load_config()

    assert config.web.listen == "0.0.0.0"
    assert config.web.port == 9100
    assert config.paths.procfs == "/proc"
    assert config.collectors.names == ["edac", "stat"]


def test_tokenize() -> None:
    tokens = tokenize('web { port 9100; listen "::"; } # comment\n/* block\ncomment */ x 10s on;')

    assert [t.type for t in tokens] == [
        TokenType.IDENTIFIER,
        TokenType.LBRACE,
        TokenType.IDENTIFIER,
        TokenType.NUMBER,
        TokenType.SEMICOLON,
        TokenType.IDENTIFIER,
        TokenType.STRING,
        TokenType.SEMICOLON,
        TokenType.RBRACE,
        TokenType.IDENTIFIER,
        TokenType.DURATION,
        TokenType.BOOLEAN,
        TokenType.SEMICOLON,
        TokenType.EOF,
    ]
    assert tokens[3].value == 9100
    assert tokens[6].value == "::"
    assert tokens[10].value == 10
    assert tokens[11].value is True
    assert tokens[9].line == 3


def test_tokenize_string_escapes() -> None:
    (token, _eof) = tokenize(r'"a\"b\\c\n"')

    assert token.value == 'a"b\\c\n'


def test_tokenize_durations() -> None:
    values = [t.value for t in tokenize("500ms 2m 1h") if t.type == TokenType.DURATION]

    assert values == pytest.approx([0.5, 120, 3600])


@pytest.mark.parametrize(
    "source,message",
    [
        ('x "unterminated;', "Unterminated string"),
        ("/* never closed", "Unterminated multi-line comment"),
        ("x 5parsecs;", "Unknown duration unit"),
        ("x @;", "Unexpected character"),
    ],
)
def test_tokenize_errors(source: str, message: str) -> None:
    with pytest.raises(LexerError, match=message):
        tokenize(source)


def test_parse_blocks_and_directives() -> None:
    doc = parse_config('edac "local" { csrows off; }\ncollectors { edac; stat off; }')

    edac = doc.get_blocks("edac")[0]
    assert edac.name == "local"
    assert edac.get_value("csrows") is False

    collectors = doc.get_blocks("collectors")[0]
    assert [d.name for d in collectors.directives] == ["edac", "stat"]
    assert collectors.directives[0].values == []


@pytest.mark.parametrize(
    "source",
    [
        "web { port 9100 }",
        "web { port 9100;",
        "web 1 { }",
        "; web { }",
    ],
)
def test_parse_errors(source: str) -> None:
    with pytest.raises(ParseError):
        parse_config(source)


def test_collectors_block() -> None:
    """A bare name enables a collector; unknown names are kept for validation."""
    loader = ConfigLoader()
    config = loader.load_string("collectors { stat off; zfs; }")

    assert config.collectors.names == ["edac", "zfs"]
    warnings = loader.validate(config, known_collectors=set(Factories))
    assert "Unknown collector 'zfs' in collectors block" in warnings


def test_later_blocks_override(tmp_path: Path) -> None:
    """Included files extend and override earlier sections."""
    (tmp_path / "conf.d").mkdir()
    (tmp_path / "conf.d" / "10-port.conf").write_text("web { port 9200; }\n")
    main = tmp_path / "config.conf"
    main.write_text('web { listen "127.0.0.1"; port 9100; }\ninclude "conf.d/*.conf";\n')

    config = ConfigLoader().load_file(main)

    assert config.web.listen == "127.0.0.1"
    assert config.web.port == 9200


def test_include_without_matches(tmp_path: Path) -> None:
    main = tmp_path / "config.conf"
    main.write_text('include "missing/*.conf";\nweb { port 9300; }\n')

    assert ConfigLoader().load_file(main).web.port == 9300


def test_circular_include(tmp_path: Path) -> None:
    (tmp_path / "a.conf").write_text('include "b.conf";\n')
    (tmp_path / "b.conf").write_text('include "a.conf";\n')

    with pytest.raises(ConfigError, match="Circular include"):
        ConfigLoader().load_file(tmp_path / "a.conf")


def test_include_lexer_error_names_file(tmp_path: Path) -> None:
    (tmp_path / "bad.conf").write_text('web { listen "oops; }\n')
    main = tmp_path / "config.conf"
    main.write_text('include "bad.conf";\n')

    with pytest.raises(ConfigError, match="bad.conf"):
        ConfigLoader().load_file(main)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        ConfigLoader().load_file(tmp_path / "nope.conf")


def test_directory_is_not_a_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Not a file"):
        ConfigLoader().load_file(tmp_path)


def test_invalid_value() -> None:
    with pytest.raises(ConfigError, match="Invalid configuration value"):
        ConfigLoader().load_string('web { port "http"; }')


def test_validate_warnings() -> None:
    """Unknown blocks and directives, bad ports and sources are reported."""
    loader = ConfigLoader()
    config = loader.load_string(
        """
        web { port 70000; bind "x"; }
        mqtt { host "localhost"; }
        paths { proc { } }
        stat { source kstat; }
        debug on;
        """
    )

    warnings = loader.validate(config)

    assert any("Unknown directive 'bind' in web block" in w for w in warnings)
    assert any("Unknown block 'mqtt'" in w for w in warnings)
    assert any("Unexpected nested block 'proc'" in w for w in warnings)
    assert any("Unknown top-level directive 'debug'" in w for w in warnings)
    assert "Web port 70000 is out of range" in warnings
    assert any("Unknown boot time source 'kstat'" in w for w in warnings)


def test_all_collectors_disabled() -> None:
    loader = ConfigLoader()
    config = loader.load_string("collectors { edac off; stat off; }")

    assert config.collectors.names == []
    assert "All collectors are disabled" in loader.validate(config)


def test_logging_block() -> None:
    config = ConfigLoader().load_string(
        'logging { level debug; file "/tmp/pe.log"; file_keep 2; colors off; }'
    )

    assert config.logging.level == "debug"
    assert config.logging.file == "/tmp/pe.log"
    assert config.logging.file_keep == 2
    assert config.logging.colors is False


def test_quoted_boolean_keywords() -> None:
    """Quoted on/off strings mean the same as the bare keywords."""
    config = ConfigLoader().load_string(
        'edac { csrows "off"; }\ncollectors { stat "OFF"; }\nlogging { colors "false"; }'
    )

    assert config.edac.csrows is False
    assert config.collectors.enabled["stat"] is False
    assert config.logging.colors is False


@pytest.mark.parametrize(
    "source",
    ["edac { csrows maybe; }", 'collectors { stat "no"; }', "logging { colors 1; }"],
)
def test_invalid_boolean(source: str) -> None:
    with pytest.raises(ConfigError, match="Invalid configuration value"):
        ConfigLoader().load_string(source)
