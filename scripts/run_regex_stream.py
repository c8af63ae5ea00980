"""
Extrai registros de um fluxo de texto e imprime um JSON por linha.

Uso:
    python scripts/run_regex_stream.py 'ab(\\d+)' --input dados.txt
    tail -f app.log | python scripts/run_regex_stream.py \\
        'user=(\\w+) age=(\\d+)' --schema '{"user": "string", "age": "number"}'
    python scripts/run_regex_stream.py 'x=(\\d+)' --schema @schema.json --flags i
"""

import argparse
import json
import logging
import math
import re
import sys
from pathlib import Path
from typing import Iterator, Optional, TextIO

# Adiciona src ao path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from regex_stream import ConstructionError, MatcherConfig, RegexTransform
from regex_stream.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=settings.log_level_number,
    format="%(asctime)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

FLAG_LETTERS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
}


def parse_flags(letters: str) -> int:
    """Converte 'ims' em flags do re."""
    flags = 0
    for letter in letters.lower():
        if letter not in FLAG_LETTERS:
            raise ValueError(f"Flag desconhecida: {letter!r} (use {''.join(FLAG_LETTERS)})")
        flags |= FLAG_LETTERS[letter]
    return flags


def load_schema(value: Optional[str]):
    """Lê schema JSON inline ou de arquivo (@caminho)."""
    if value is None:
        return None
    if value.startswith("@"):
        value = Path(value[1:]).read_text(encoding="utf-8")
    return json.loads(value)


def read_fragments(stream: TextIO, read_size: int) -> Iterator[str]:
    """Lê a entrada em fragmentos de até read_size caracteres."""
    while True:
        fragment = stream.read(read_size)
        if not fragment:
            break
        yield fragment


def json_safe(value):
    """Troca NaN/inf por None, já que JSON não tem esses valores."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(v) for v in value]
    return value


def to_json_line(record) -> str:
    return json.dumps(json_safe(record), ensure_ascii=False, allow_nan=False)


def run(
    pattern: str,
    schema,
    stream: TextIO,
    out: TextIO,
    flags: int = 0,
    read_size: int = 65536,
) -> int:
    """Processa o fluxo e escreve os registros; retorna quantos foram emitidos."""
    # Só listener: nenhum registro fica retido enquanto o fluxo durar
    transform = RegexTransform(pattern, schema, MatcherConfig(flags=flags), keep_records=False)

    @transform.on_record
    def write_record(record):
        out.write(to_json_line(record) + "\n")
        out.flush()

    for fragment in read_fragments(stream, read_size):
        transform.feed(fragment)
    transform.finish()

    return transform.record_count


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Extrai registros estruturados de um fluxo de texto")
    parser.add_argument("pattern", help="Expressão regular com grupos de captura")
    parser.add_argument("--schema", default=None, help="Schema JSON (lista ou objeto) ou @arquivo.json")
    parser.add_argument("--input", "-i", default=None, help="Arquivo de entrada (padrão: stdin)")
    parser.add_argument("--flags", default="", help="Flags do regex: i, m, s, x")
    parser.add_argument("--read-size", type=int, default=settings.read_size, help="Tamanho do fragmento lido")
    args = parser.parse_args(argv)

    if args.read_size < 1:
        logger.error(f"Argumento inválido: --read-size deve ser >= 1 (recebido {args.read_size})")
        return 2

    try:
        flags = parse_flags(args.flags)
        schema = load_schema(args.schema)
    except (ValueError, OSError) as e:
        logger.error(f"Argumento inválido: {e}")
        return 2

    try:
        if args.input:
            with open(args.input, encoding=settings.encoding) as f:
                count = run(args.pattern, schema, f, sys.stdout, flags, args.read_size)
        else:
            count = run(args.pattern, schema, sys.stdin, sys.stdout, flags, args.read_size)
    except ConstructionError as e:
        logger.error(f"Configuração inválida: {e}")
        return 2

    logger.info(f"{count} registros extraídos")
    return 0


if __name__ == "__main__":
    sys.exit(main())
