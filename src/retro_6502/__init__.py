# src/retro_6502/__init__.py
"""
MOS 6502 エミュレータ・パッケージ。
"""
__version__ = "0.1.0"
