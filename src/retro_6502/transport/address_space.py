# src/retro_6502/transport/address_space.py
"""
Transport Layer (アドレス空間)

このモジュールは、CPUとローダーが共有する64KiBのフラットなアドレス空間を提供します。
アドレス演算は常に65536でラップアラウンドし、読み書きが失敗することはありません。
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List

ADDRESS_SPACE_SIZE = 0x10000
RESET_VECTOR_ADDR = 0xFFFC
# 元のホームコンピュータ構成におけるリセットISRのデフォルト ($FCE2)
DEFAULT_RESET_VECTOR = 0xFCE2


# @intent:responsibility バスアクセスを記録するためのタイプを定義します。
class BusAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"


# @intent:responsibility 個々のバスアクセス操作を記録します。
@dataclass(frozen=True)
class BusAccess:
    """
    バス上で行われた単一のアクセス（読み込みまたは書き込み）を記録するデータクラス。
    """
    address: int
    data: int  # 8bit value
    access_type: BusAccessType


# @intent:responsibility CPUが依存するメモリバックエンドのインターフェースを定義します。
class Device(ABC):
    """
    CPUコアが必要とするのはバイト単位のread/writeのみです。
    メモリマップドI/Oなどを追加する場合は、このインターフェースをデコレートして実装します。
    """
    @abstractmethod
    def read(self, address: int) -> int:
        """
        指定されたアドレスから8bitのデータを読み出します。
        """
        pass

    @abstractmethod
    def write(self, address: int, data: int) -> None:
        """
        指定されたアドレスに8bitのデータを書き込みます。
        """
        pass

    # @intent:responsibility バスアクティビティを記録しないバックエンドでは常に空のログを返します。
    def get_and_clear_activity_log(self) -> List[BusAccess]:
        return []


# @intent:responsibility 64KiBのフラットなバイト配列としてアドレス空間を保持します。
# @intent:rationale 全てのCPUアクセスを記録し、Snapshotに含めることで観測可能性を高めます。
class AddressSpace(Device):
    """
    16bitアドレスから8bit値へのマッピング。
    リセットベクトル ($FFFC/$FFFD) 以外はゼロで初期化されます。
    """
    # @intent:responsibility メモリを初期化し、リセットベクトルを書き込みます。
    def __init__(self, reset_vector: int = DEFAULT_RESET_VECTOR):
        self._memory = bytearray(ADDRESS_SPACE_SIZE)
        self._bus_activity_log: List[BusAccess] = []
        self.reset_vector = reset_vector

    @property
    def reset_vector(self) -> int:
        lo = self._memory[RESET_VECTOR_ADDR]
        hi = self._memory[RESET_VECTOR_ADDR + 1]
        return (hi << 8) | lo

    @reset_vector.setter
    def reset_vector(self, value: int) -> None:
        self._memory[RESET_VECTOR_ADDR] = value & 0xFF
        self._memory[RESET_VECTOR_ADDR + 1] = (value >> 8) & 0xFF

    def get_size(self) -> int:
        return ADDRESS_SPACE_SIZE

    def _log_access(self, address: int, data: int, access_type: BusAccessType) -> None:
        self._bus_activity_log.append(BusAccess(address=address, data=data, access_type=access_type))

    # @intent:responsibility 記録されたバスアクティビティログを取得し、クリアします。
    def get_and_clear_activity_log(self) -> List[BusAccess]:
        log = self._bus_activity_log
        self._bus_activity_log = []
        return log

    # @intent:responsibility 指定されたアドレスから8bitのデータを読み出します。
    # @intent:post-condition 範囲外のアドレスは65536でラップされるため、例外は発生しません。
    def read(self, address: int) -> int:
        address &= 0xFFFF
        data = self._memory[address]
        self._log_access(address, data, BusAccessType.READ)
        return data

    # @intent:responsibility ログを記録せずに読み出します（インスペクタ、テスト用）。
    def peek(self, address: int) -> int:
        return self._memory[address & 0xFFFF]

    # @intent:responsibility 指定されたアドレスに8bitのデータを書き込みます。
    def write(self, address: int, data: int) -> None:
        address &= 0xFFFF
        data &= 0xFF
        self._memory[address] = data
        self._log_access(address, data, BusAccessType.WRITE)

    # @intent:responsibility ローダー用の一括書き込み。バスアクティビティとしては記録しません。
    # @intent:note 末尾が$FFFFを越える場合は$0000へ折り返します。
    def load(self, start: int, data: Iterable[int]) -> None:
        payload = bytes(data)
        start &= 0xFFFF
        head = min(len(payload), ADDRESS_SPACE_SIZE - start)
        self._memory[start:start + head] = payload[:head]
        rest = payload[head:]
        while rest:
            chunk = rest[:ADDRESS_SPACE_SIZE]
            self._memory[0:len(chunk)] = chunk
            rest = rest[ADDRESS_SPACE_SIZE:]

    # @intent:responsibility 指定範囲のコピーを返します（ダンプ用）。
    def dump(self, start: int, length: int) -> bytes:
        return bytes(self.peek(start + i) for i in range(length))
