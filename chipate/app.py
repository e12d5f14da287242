"""The emulator window: keyboard input, the machine cycle and drawing."""

from __future__ import annotations

import argparse
from collections.abc import Iterable, Iterator, Sequence

from chipate.assembler import Assembler
from chipate.cpu import SCREEN_HEIGHT, SCREEN_WIDTH, Cpu

SCREEN_SCALE = 16
FPS = 60

BLACK = (0, 0, 0)
DARKGRAY = (80, 80, 80)
LIME = (0, 158, 47)

_KEYMAP = {
    "1": 0x0, "2": 0x1, "3": 0x2, "4": 0x3,
    "q": 0x4, "w": 0x5, "e": 0x6, "r": 0x7,
    "a": 0x8, "s": 0x9, "d": 0xA, "f": 0xB,
    "z": 0xC, "x": 0xD, "c": 0xE, "v": 0xF,
}


def key_for(name: str) -> int | None:
    """Return the keypad key bound to a keyboard key name, or None."""
    return _KEYMAP.get(name.lower())


def pixel_rects(
    display: Iterable[int], scale: int = SCREEN_SCALE
) -> Iterator[tuple[int, int, int, int]]:
    """Yield (x, y, width, height) screen rectangles for every lit pixel."""
    for index, pixel in enumerate(display):
        if pixel:
            y, x = divmod(index, SCREEN_WIDTH)
            yield x * scale, y * scale, scale, scale


def _load(cpu: Cpu, program: str, rom: bool) -> None:
    if rom:
        cpu.read_rom(program)
    else:
        assembler = Assembler()
        assembler.compile(program)
        cpu.load_program(assembler.generate())


def main(argv: Sequence[str] | None = None) -> int:
    """Assemble or load a program and run it in a window."""
    parser = argparse.ArgumentParser(prog="chipate", description="CHIP-8 emulator")
    parser.add_argument(
        "program",
        nargs="?",
        default="./roms/test.asm",
        help="assembly source to run (default: %(default)s)",
    )
    parser.add_argument(
        "--rom", action="store_true", help="treat the program as a binary ROM"
    )
    args = parser.parse_args(argv)

    cpu = Cpu()
    _load(cpu, args.program, args.rom)

    import pygame

    pygame.init()
    try:
        screen = pygame.display.set_mode(
            (SCREEN_WIDTH * SCREEN_SCALE, SCREEN_HEIGHT * SCREEN_SCALE)
        )
        pygame.display.set_caption("CHIP-8")
        clock = pygame.time.Clock()
        is_debug = False
        running = True

        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_F1:
                        is_debug = not is_debug
                    else:
                        key = key_for(pygame.key.name(event.key))
                        if key is not None:
                            cpu.set_key(key)
                elif event.type == pygame.KEYUP:
                    key = key_for(pygame.key.name(event.key))
                    if key is not None:
                        cpu.unset_key(key)
            if not running:
                break

            cpu.decrement_timers()
            cpu.step()

            screen.fill(BLACK)
            screen.fill(DARKGRAY)
            for rect in pixel_rects(cpu.display, SCREEN_SCALE):
                pygame.draw.rect(screen, LIME, rect)
            if is_debug:
                for y in range(SCREEN_HEIGHT):
                    for x in range(SCREEN_WIDTH):
                        pygame.draw.rect(
                            screen,
                            BLACK,
                            (x * SCREEN_SCALE, y * SCREEN_SCALE, SCREEN_SCALE, SCREEN_SCALE),
                            1,
                        )
            pygame.display.flip()
            clock.tick(FPS)
    finally:
        pygame.quit()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())