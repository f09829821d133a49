# tests/arch/mos6502/test_instructions_control.py
import pytest


# @intent:test_suite サブルーチン呼び出しとスタック操作の検証。
def test_jsr_rts_round_trip(program, space):
    # $0200: JSR $0300 ; $0300: RTS
    space.write(0x0300, 0x60)
    cpu = program([0x20, 0x00, 0x03])

    jsr = cpu.step()
    state = cpu.get_state()
    assert state.pc == 0x0300
    assert state.sp == 0x01FB
    # Return address is the last byte of JSR ($0202)
    assert space.peek(0x01FD) == 0x02
    assert space.peek(0x01FC) == 0x02
    assert jsr.operation.cycle_count == 6

    rts = cpu.step()
    state = cpu.get_state()
    assert state.pc == 0x0203
    assert state.sp == 0x01FD
    assert rts.operation.cycle_count == 6


def test_jmp_absolute(program):
    cpu = program([0x4C, 0x34, 0x12])
    snapshot = cpu.step()
    assert cpu.get_state().pc == 0x1234
    assert snapshot.operation.cycle_count == 3


def test_pha_pla(program, space):
    # LDA #$80; PHA; LDA #$00; PLA
    cpu = program([0xA9, 0x80, 0x48, 0xA9, 0x00, 0x68])
    for _ in range(4):
        cpu.step()
    state = cpu.get_state()
    assert state.a == 0x80
    assert state.flag_n
    assert not state.flag_z
    assert state.sp == 0x01FD
    assert space.peek(0x01FD) == 0x80


def test_php_pushes_break_and_reserved_bits(program, space):
    cpu = program([0x08])
    cpu.step()
    assert space.peek(0x01FD) == 0x34
    assert cpu.get_state().p == 0x24


def test_plp_clears_break_and_keeps_reserved(program, space):
    # LDA #$CF; PHA; PLP
    cpu = program([0xA9, 0xCF, 0x48, 0x28])
    for _ in range(3):
        cpu.step()
    # $CF -> B cleared, bit 5 forced on
    assert cpu.get_state().p == 0xEF


def test_stack_pointer_wraps_within_page(program, space):
    cpu = program([0x48])
    cpu.set_state(sp=0x00, a=0x42)
    cpu.step()
    assert space.peek(0x0100) == 0x42
    assert cpu.get_state().sp == 0x01FF


@pytest.mark.parametrize("opcode, flag, expected", [
    (0x38, "flag_c", True),
    (0x18, "flag_c", False),
    (0xF8, "flag_d", True),
    (0xD8, "flag_d", False),
    (0x78, "flag_i", True),
    (0x58, "flag_i", False),
])
def test_flag_instructions(program, opcode, flag, expected):
    cpu = program([opcode])
    cpu.step()
    assert getattr(cpu.get_state(), flag) is expected


def test_clv(program):
    cpu = program([0xB8])
    cpu.set_state(p=0x64)
    cpu.step()
    assert not cpu.get_state().flag_v


def test_nop(program):
    cpu = program([0xEA])
    before = cpu.get_state()
    snapshot = cpu.step()
    after = cpu.get_state()
    assert after.pc == 0x0201
    assert (after.a, after.x, after.y, after.p, after.sp) == (before.a, before.x, before.y, before.p, before.sp)
    assert snapshot.operation.cycle_count == 2


# @intent:test_suite BRK/RTIによるソフトウェア割り込みの往復。
def test_brk_rti_round_trip(program, space):
    space.write(0xFFFE, 0x00)
    space.write(0xFFFF, 0x90)
    space.write(0x9000, 0x40)  # RTI
    cpu = program([0x00, 0xEA])
    cpu.set_state(p=0x20)

    brk = cpu.step()
    state = cpu.get_state()
    assert state.pc == 0x9000
    assert state.flag_i
    assert state.sp == 0x01FA
    assert space.peek(0x01FD) == 0x02
    assert space.peek(0x01FC) == 0x02
    assert space.peek(0x01FB) == 0x30
    assert brk.operation.cycle_count == 7

    cpu.step()
    state = cpu.get_state()
    assert state.pc == 0x0202
    assert state.p == 0x20
    assert state.sp == 0x01FD
