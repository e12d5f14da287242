import pytest

from chipate.cpu import (
    DISPLAY_SIZE,
    FONT_START_ADDR,
    FONTSET,
    FONTSET_SIZE,
    PROG_START_ADDR,
    STACK_SIZE,
    Cpu,
    UnknownOpcodeError,
)


def run(program):
    cpu = Cpu()
    cpu.load_program(program)
    for _ in range(len(program) // 2):
        cpu.step()
    return cpu


def test_initialize_loads_font_and_sets_pc():
    cpu = Cpu()
    assert cpu.pc == PROG_START_ADDR
    assert bytes(cpu.memory[FONT_START_ADDR:FONT_START_ADDR + FONTSET_SIZE]) == FONTSET
    assert cpu.sp == 0 and cpu.i == 0


def test_initialize_resets_state():
    cpu = run([0x61, 0x2A])
    cpu.initialize()
    assert cpu.v[1] == 0
    assert cpu.pc == PROG_START_ADDR


def test_fetch_reads_opcode_and_advances():
    cpu = Cpu()
    cpu.load_program([0x12, 0x34])
    cpu.fetch()
    assert cpu.opcode == 0x1234
    assert cpu.pc == PROG_START_ADDR + 2


def test_load_value_into_register():
    cpu = run([0x61, 0x2A])
    assert cpu.v[1] == 0x2A


def test_add_wraps_at_byte():
    cpu = run([0x61, 0xFF, 0x71, 0x02])
    assert cpu.v[1] == 1


def test_jump():
    cpu = run([0x13, 0x45])
    assert cpu.pc == 0x345


def test_call_pushes_return_address():
    cpu = run([0x23, 0x45])
    assert cpu.pc == 0x345
    assert cpu.sp == 1
    assert cpu.stack[0] == PROG_START_ADDR + 2


def test_call_with_full_stack_does_nothing():
    cpu = Cpu()
    cpu.load_program([0x23, 0x45])
    cpu.sp = STACK_SIZE
    cpu.step()
    assert cpu.sp == STACK_SIZE
    assert cpu.pc == PROG_START_ADDR + 2


def test_unknown_opcode_raises():
    cpu = Cpu()
    cpu.load_program([0x30, 0x00])
    with pytest.raises(UnknownOpcodeError, match="0x3000 at address 0x0200"):
        cpu.step()


def test_copy_register():
    cpu = run([0x62, 0x2A, 0x81, 0x20])
    assert cpu.v[1] == cpu.v[2] == 0x2A


def test_and_registers():
    cpu = run([0x60, 0xFF, 0x61, 0x3C, 0x80, 0x12])
    assert cpu.v[0] == 0x3C


def test_load_index():
    cpu = run([0xA3, 0x45])
    assert cpu.i == 0x345


def test_draw_font_sprite_and_collision():
    # V0 = 0, V1 = 0, I = font digit 0, draw 5 rows
    cpu = run([0x60, 0x00, 0xF0, 0x29, 0xD0, 0x15])
    assert cpu.i == FONT_START_ADDR
    assert bytes(cpu.display[0:8]) == bytes([1, 1, 1, 1, 0, 0, 0, 0])
    assert cpu.v[0xF] == 0
    cpu.load_program([0xD0, 0x15])
    cpu.pc = PROG_START_ADDR
    cpu.step()
    assert not any(cpu.display)
    assert cpu.v[0xF] == 1


def test_clear_screen():
    cpu = run([0x60, 0x00, 0xF0, 0x29, 0xD0, 0x15, 0x00, 0xE0])
    assert not any(cpu.display)
    assert len(cpu.display) == DISPLAY_SIZE


def test_font_address_for_digit_one():
    cpu = run([0x63, 0x01, 0xF3, 0x29])
    assert cpu.memory[cpu.i] == 0x20


def test_add_index():
    cpu = run([0xA3, 0x00, 0x63, 0x10])
    before = cpu.i
    cpu.load_program([0xF3, 0x1E])
    cpu.pc = PROG_START_ADDR
    cpu.step()
    assert cpu.i - before == cpu.v[3]


def test_wait_for_key_repeats_until_pressed():
    cpu = Cpu()
    cpu.load_program([0xF4, 0x0A])
    cpu.step()
    assert cpu.pc == PROG_START_ADDR
    cpu.set_key(5)
    cpu.step()
    assert cpu.v[4] == 5
    assert cpu.pc == PROG_START_ADDR + 2


def test_unset_key():
    cpu = Cpu()
    cpu.set_key(3)
    assert cpu.keypad[3]
    cpu.unset_key(3)
    assert cpu.keypad[3] is False or cpu.keypad[3] == 0
    assert sum(bool(k) for k in cpu.keypad) == 0
    # With no key held, waiting for a key keeps the pc on the same instruction.
    cpu.load_program([0xF4, 0x0A])
    cpu.step()
    assert cpu.pc == PROG_START_ADDR
    assert cpu.v[4] == 0


def test_invalid_key_raises():
    cpu = Cpu()
    with pytest.raises(ValueError):
        cpu.set_key(16)


def test_timers_roundtrip_and_decrement():
    cpu = run([0x62, 0x02, 0xF2, 0x15, 0xF2, 0x18])
    assert cpu.delay_timer == 2 and cpu.sound_timer == 2
    for _ in range(5):
        cpu.decrement_timers()
    assert cpu.delay_timer == 0 and cpu.sound_timer == 0
    cpu.load_program([0xF5, 0x07])
    cpu.pc = PROG_START_ADDR
    cpu.step()
    assert cpu.v[5] == cpu.delay_timer


def test_read_rom(tmp_path):
    rom = tmp_path / "prog.ch8"
    rom.write_bytes(bytes([0x61, 0x2A]))
    cpu = Cpu()
    cpu.read_rom(rom)
    cpu.step()
    assert cpu.v[1] == 0x2A


def test_program_too_large_raises():
    cpu = Cpu()
    with pytest.raises(ValueError):
        cpu.load_program(bytes(4096))