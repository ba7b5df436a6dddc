"""
Developer Tools.
"""
import uuid

import pytest
from jose import jwt

from tools import PremiumRequiredError
from tools.developer import (
    base64_converter,
    hash_generator,
    hex_rgb_converter,
    html_encoder_decoder,
    json_formatter,
    jwt_decoder,
    number_base_converter,
    parse_user_agent,
    regex_tester,
    url_encoder_decoder,
    uuid_generator,
)

CHROME_WINDOWS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
SAFARI_IPHONE = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_1 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.1 Mobile/15E148 Safari/604.1"
)


class TestFormattingAndEncoding:
    def test_json_format_and_minify(self):
        text = '{"b": 1, "a": [1, 2]}'

        assert json_formatter({"json": text})["output"] == '{\n  "b": 1,\n  "a": [\n    1,\n    2\n  ]\n}'
        assert json_formatter({"json": text, "mode": "minify"})["output"] == '{"b":1,"a":[1,2]}'

    def test_invalid_json_reports_position(self):
        with pytest.raises(ValueError, match=r"Invalid JSON: Expecting value \(line 1, column 6\)"):
            json_formatter({"json": '{"a":}'})

    def test_hashes(self):
        hashes = hash_generator({"text": "abc"})["hashes"]

        assert hashes["MD5"] == "900150983cd24fb0d6963f7d28e17f72"
        assert hashes["SHA-1"] == "a9993e364706816aba3e25717850c26c9cd0d89d"
        assert hashes["SHA-256"] == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        assert len(hashes["SHA-512"]) == 128

    def test_base64(self):
        assert base64_converter({"text": "hello"})["output"] == "aGVsbG8="
        assert base64_converter({"text": "aGVsbG8=", "mode": "decode"})["output"] == "hello"

    def test_invalid_base64(self):
        with pytest.raises(ValueError, match="Invalid Base64 input"):
            base64_converter({"text": "@@@", "mode": "decode"})

    def test_html_entities(self):
        encoded = html_encoder_decoder({"text": "<a href=\"x\">Tom & 'Jerry'</a>"})["output"]

        assert encoded == "&lt;a href=&quot;x&quot;&gt;Tom &amp; &#039;Jerry&#039;&lt;/a&gt;"
        assert html_encoder_decoder({"text": "&amp;lt;", "mode": "decode"})["output"] == "&lt;"

    def test_url_encode_like_uri_component(self):
        assert url_encoder_decoder({"text": "a b&c/d?é!"})["output"] == "a%20b%26c%2Fd%3F%C3%A9!"
        assert url_encoder_decoder({"text": "a%20b%2Fc", "mode": "decode"})["output"] == "a b/c"

    def test_url_decode_errors(self):
        with pytest.raises(ValueError, match="malformed escape"):
            url_encoder_decoder({"text": "100%", "mode": "decode"})
        with pytest.raises(ValueError, match="not valid UTF-8"):
            url_encoder_decoder({"text": "%FF", "mode": "decode"})


class TestRegexUuidAndBases:
    def test_global_matches_with_groups(self):
        result = regex_tester({"pattern": r"(\d+)-(?P<word>\w+)", "text": "1-a 22-bb"})

        assert result["match_count"] == 2
        assert result["matches"][0] == {"match": "1-a", "index": 0, "groups": ["1", "a"], "named_groups": {"word": "a"}}
        assert result["matches"][1]["index"] == 4

    def test_flags(self):
        assert regex_tester({"pattern": "abc", "text": "ABC abc", "flags": "gi"})["match_count"] == 2
        assert regex_tester({"pattern": "abc", "text": "abc abc", "flags": ""})["match_count"] == 1

    def test_unsupported_flag(self):
        with pytest.raises(ValueError, match="Unsupported regex flags: x"):
            regex_tester({"pattern": "a", "text": "a", "flags": "gx"})

    def test_single_uuid_is_free(self):
        value = uuid_generator({})["uuids"][0]
        assert uuid.UUID(value).version == 4

    def test_bulk_uuids_are_premium(self):
        with pytest.raises(PremiumRequiredError):
            uuid_generator({"count": 3})

        result = uuid_generator({"count": 3, "uppercase": True}, premium=True)
        assert len(set(result["uuids"])) == 3
        assert all(value == value.upper() for value in result["uuids"])

    def test_number_bases(self):
        result = number_base_converter({"value": "255", "from_base": "10", "to_base": "16"})

        assert result["output"] == "ff"
        assert result["conversions"] == {
            "binary": "11111111", "octal": "377", "decimal": "255", "hexadecimal": "FF",
        }
        assert number_base_converter({"value": "-1010", "from_base": "2", "to_base": "10"})["output"] == "-10"

    def test_invalid_digit_for_base(self):
        with pytest.raises(ValueError, match="Invalid number for base 2"):
            number_base_converter({"value": "12", "from_base": "2"})


class TestTokensAndColors:
    def test_jwt_decoding(self):
        token = jwt.encode({"sub": "42", "exp": 2000000000, "iat": 1700000000}, "secret", algorithm="HS256")
        result = jwt_decoder({"token": token})

        assert result["header"]["alg"] == "HS256"
        assert result["payload"]["sub"] == "42"
        assert result["exp_at"] == "2033-05-18T03:33:20+00:00"
        assert result["expired"] is False

    def test_expired_jwt(self):
        token = jwt.encode({"exp": 1000000000}, "secret", algorithm="HS256")
        assert jwt_decoder({"token": token})["expired"] is True

    def test_jwt_without_exp(self):
        token = jwt.encode({"sub": "1"}, "secret", algorithm="HS256")
        assert jwt_decoder({"token": token})["expired"] is None

    def test_malformed_jwt(self):
        with pytest.raises(ValueError, match="three parts"):
            jwt_decoder({"token": "abc.def"})

    def test_hex_and_rgb(self):
        assert hex_rgb_converter({"value": "#fff"})["rgb"] == "rgb(255, 255, 255)"
        result = hex_rgb_converter({"value": "rgb(255, 128, 0)", "mode": "rgb-to-hex"})
        assert result["hex"] == "#ff8000"
        assert (result["r"], result["g"], result["b"]) == (255, 128, 0)

    def test_invalid_colors(self):
        with pytest.raises(ValueError, match="Invalid hex color"):
            hex_rgb_converter({"value": "#ggg"})
        with pytest.raises(ValueError, match="between 0 and 255"):
            hex_rgb_converter({"value": "rgb(300, 0, 0)", "mode": "rgb-to-hex"})


class TestUserAgent:
    def test_desktop_chrome(self):
        result = parse_user_agent(CHROME_WINDOWS)

        assert result["browser"] == {"name": "Chrome", "version": "120.0.0.0"}
        assert result["os"] == {"name": "Windows", "version": "10/11"}
        assert result["device"] == {"type": "Desktop"}
        assert result["engine"]["name"] == "Blink"

    def test_iphone_safari(self):
        result = parse_user_agent(SAFARI_IPHONE)

        assert result["browser"] == {"name": "Safari", "version": "17.1"}
        assert result["os"] == {"name": "iOS", "version": "17.1"}
        assert result["device"]["type"] == "Mobile"
        assert result["engine"] == {"name": "WebKit", "version": "605.1.15"}

    def test_edge_is_not_reported_as_chrome(self):
        result = parse_user_agent(CHROME_WINDOWS + " Edg/120.0.2210.91")
        assert result["browser"] == {"name": "Edge", "version": "120.0.2210.91"}

    def test_bot(self):
        ua = "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)"
        assert parse_user_agent(ua)["device"]["type"] == "Bot"
