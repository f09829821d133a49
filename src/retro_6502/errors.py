# src/retro_6502/errors.py
"""
エミュレータ全体で使用する例外と診断レポートの定義。
"""
from dataclasses import dataclass


# @intent:responsibility 本パッケージが送出する全例外の基底クラス。
class EmulatorError(Exception):
    pass


# @intent:responsibility カートリッジイメージのロード失敗を表します。ブートはCPU実行前に中断されます。
class LoadError(EmulatorError):
    pass


# @intent:responsibility ファイルが存在しない、または読み出せない場合のエラー。
# @intent:rationale OSErrorも継承し、呼び出し元が通常のI/Oエラーとして扱えるようにします。
class ImageIOError(LoadError, OSError):
    pass


# @intent:responsibility ヘッダが宣言するバンク量よりファイルが短い場合のエラー。
class TruncatedImageError(LoadError):
    """
    section: 不足していたセクション名 ("header", "trainer", "PRG", "CHR")
    expected / actual: 期待バイト数と実際に読めたバイト数
    """
    def __init__(self, section: str, expected: int, actual: int):
        super().__init__(
            f"Truncated image: {section} section expected {expected} bytes, got {actual}."
        )
        self.section = section
        self.expected = expected
        self.actual = actual


# @intent:responsibility マジックナンバーが不正なイメージ（strictモード時）。
class InvalidHeaderError(LoadError):
    pass


# @intent:responsibility マシン構成ファイルの内容が不正な場合のエラー。
class ConfigError(EmulatorError, ValueError):
    pass


# @intent:responsibility デコードできないオペコードの診断レポート。
# @intent:rationale 例外ではなく非致命的な記録として扱い、実行ループは1サイクルのNOPとして継続します。
@dataclass(frozen=True)
class UnimplementedOpcode:
    address: int  # オペコードをフェッチしたアドレス
    opcode: int

    def __str__(self) -> str:
        return f"Unimplemented opcode ${self.opcode:02X} at ${self.address:04X}"
