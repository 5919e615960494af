"""Run code snippets through an online compiler service."""

from __future__ import annotations

import os
import re

import requests

API_URL = "https://tool.runoob.com/compile2.php"
API_TOKEN = os.environ.get("GROUPFUN_RUNOOB_TOKEN", "token")
TIMEOUT = 15

HEADERS = {
    "Content-Type": "application/x-www-form-urlencoded; charset=UTF-8",
    "Referer": "https://c.runoob.com/",
    "User-Agent": "Mozilla/5.0 (Windows NT 6.1; Win64; x64; rv:87.0) Gecko/20100101 Firefox/87.0",
}

TRUNCATION = "\n............\n............"

_CSHARP = (
    "using System;\nnamespace HelloWorldApplication\n{\n   class HelloWorld\n   {\n"
    "      static void Main(string[] args)\n      {\n"
    "         Console.WriteLine(\"Hello World!\");\n      }\n   }\n}"
)
_CPP = (
    "#include <iostream>\nusing namespace std;\n\nint main()\n{\n"
    "   cout << \"Hello World\";\n   return 0;\n}"
)
_JS = "console.log(\"Hello World!\");"
_RUBY = "puts \"Hello World!\";"
_RUST = "fn main() {\n    println!(\"Hello World!\");\n}"
_PY = "print(\"Hello, World!\")"
_SHELL = "echo 'Hello World!'"
_KOTLIN = "fun main(args : Array<String>){\n    println(\"Hello World!\")\n}"
_TS = "const hello : string = \"Hello World!\"\nconsole.log(hello)"
_SWIFT = "var myString = \"Hello, World!\"\nprint(myString)"

TEMPLATES = {
    "py2": "print 'Hello World!'",
    "ruby": _RUBY,
    "rb": _RUBY,
    "php": "<?php\n\techo 'Hello World!';\n?>",
    "javascript": _JS,
    "js": _JS,
    "node.js": _JS,
    "scala": "object Main {\n  def main(args:Array[String])\n  {\n    println(\"Hello World!\")\n  }\n\t\t\n}",
    "go": "package main\n\nimport \"fmt\"\n\nfunc main() {\n   fmt.Println(\"Hello, World!\")\n}",
    "c": "#include <stdio.h>\n\nint main()\n{\n   printf(\"Hello, World! \n\");\n   return 0;\n}",
    "c++": _CPP,
    "cpp": _CPP,
    "java": "public class HelloWorld {\n    public static void main(String []args) {\n       System.out.println(\"Hello World!\");\n    }\n}",
    "rust": _RUST,
    "rs": _RUST,
    "c#": _CSHARP,
    "cs": _CSHARP,
    "csharp": _CSHARP,
    "shell": _SHELL,
    "bash": _SHELL,
    "erlang": "% escript will ignore the first line\n\nmain(_) ->\n    io:format(\"Hello World!~n\").",
    "perl": "print \"Hello, World!\n\";",
    "python": _PY,
    "py": _PY,
    "swift": _SWIFT,
    "lua": _SWIFT,
    "pascal": "runcode Hello;\nbegin\n  writeln ('Hello, world!')\nend.",
    "kotlin": _KOTLIN,
    "kt": _KOTLIN,
    "r": "myString <- \"Hello, World!\"\nprint ( myString)",
    "vb": "Module Module1\n\n    Sub Main()\n        Console.WriteLine(\"Hello World!\")\n    End Sub\n\nEnd Module",
    "typescript": _TS,
    "ts": _TS,
}

LANGUAGES: dict[str, tuple[str, str]] = {
    "py2": ("0", "py"),
    "ruby": ("1", "rb"),
    "rb": ("1", "rb"),
    "php": ("3", "php"),
    "javascript": ("4", "js"),
    "js": ("4", "js"),
    "node.js": ("4", "js"),
    "scala": ("5", "scala"),
    "go": ("6", "go"),
    "c": ("7", "c"),
    "c++": ("7", "cpp"),
    "cpp": ("7", "cpp"),
    "java": ("8", "java"),
    "rust": ("9", "rs"),
    "rs": ("9", "rs"),
    "c#": ("10", "cs"),
    "cs": ("10", "cs"),
    "csharp": ("10", "cs"),
    "shell": ("10", "sh"),
    "bash": ("10", "sh"),
    "erlang": ("12", "erl"),
    "perl": ("14", "pl"),
    "python": ("15", "py3"),
    "py": ("15", "py3"),
    "swift": ("16", "swift"),
    "lua": ("17", "lua"),
    "pascal": ("18", "pas"),
    "kotlin": ("19", "kt"),
    "kt": ("19", "kt"),
    "r": ("80", "r"),
    "vb": ("84", "vb"),
    "typescript": ("1010", "ts"),
    "ts": ("1010", "ts"),
}

COMMAND = re.compile(r"^>runcode(raw)?\s(.+?)\s([\s\S]+)$")
UNSUPPORTED = "语言不是受支持的编程语种呢~"


class RunCodeError(Exception):
    """The language is unknown or the remote run failed."""


def clear_newline_suffix(text: str) -> str:
    """Strip every trailing newline."""
    return text.rstrip("\n")


def cut_too_long(text: str) -> str:
    """Cut text after 30 line breaks or about 1000 characters."""
    count = 0
    for i, ch in enumerate(text):
        if ch == "\r" and text[i + 1 : i + 2] == "\n":
            pass
        elif ch in "\n\r":
            count += 1
        if count > 30 or i > 1000:
            return text[: i - 1] + TRUNCATION
    return text


def lookup_language(language: str) -> tuple[str, str]:
    """Return the service's (language id, file extension) for a language name."""
    try:
        return LANGUAGES[language.lower()]
    except KeyError:
        raise RunCodeError(UNSUPPORTED) from None


def template_for(language: str) -> str:
    """Return the hello-world template for a language name."""
    try:
        return TEMPLATES[language.lower()]
    except KeyError:
        raise RunCodeError(UNSUPPORTED) from None


def run_code(code: str, run_type: tuple[str, str]) -> str:
    """Send code to the compiler service and return its trimmed output."""
    form = {
        "code": code,
        "token": API_TOKEN,
        "stdin": "",
        "language": run_type[0],
        "fileext": run_type[1],
    }
    try:
        response = requests.post(API_URL, data=form, headers=HEADERS, timeout=TIMEOUT)
    except requests.RequestException as exc:
        raise RunCodeError(str(exc)) from exc
    if response.status_code != 200:
        raise RunCodeError("code not 200")
    try:
        content = response.json()
    except ValueError as exc:
        raise RunCodeError(str(exc)) from exc
    errors = content.get("errors")
    if not isinstance(errors, str):
        errors = ""
    if errors != "\n\n":
        raise RunCodeError(cut_too_long(clear_newline_suffix(errors)))
    output = content.get("output")
    if not isinstance(output, str):
        output = ""
    return cut_too_long(clear_newline_suffix(output))


def _unescape_cq(text: str) -> str:
    return text.replace("&#91;", "[").replace("&#93;", "]").replace("&amp;", "&")


def handle_command(message: str, nickname: str) -> str | None:
    """Answer a ``>runcode`` chat command; None if the message is not one."""
    matched = COMMAND.match(message)
    if matched is None:
        return None
    is_raw = matched.group(1) is not None
    language = matched.group(2).lower()
    header = f"> {nickname}\n"
    try:
        run_type = lookup_language(language)
    except RunCodeError:
        return header + UNSUPPORTED
    block = _unescape_cq(matched.group(3))
    if block == "help":
        return (
            f"> {nickname}  {language}-template:\n"
            f">runcode {language}\n{TEMPLATES[language]}"
        )
    try:
        output = run_code(block, run_type)
    except RunCodeError as exc:
        return f"{header}ERROR:{exc}"
    return output if is_raw else header + output