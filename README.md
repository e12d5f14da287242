# chipate

chipate is a small CHIP-8 interpreter. It also has a simple assembler that turns
CHIP-8 assembly text into byte code. A pygame window shows the 64×32 display.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Running

```
chipate [PROGRAM] [--rom]
```

- `PROGRAM` is an assembly source file. The default is `./roms/test.asm`, relative to
  the working directory. The file is assembled and the result is loaded at `0x200`.
- `--rom` loads `PROGRAM` as a binary ROM instead of assembling it.

The window is 16 times the CHIP-8 resolution. Each frame, the timers go down by one
and one instruction runs. The loop is capped at 60 frames per second.
Press **F1** to turn the pixel grid overlay on or off. Press **Esc** or close the
window to quit.

### Keypad

The 16-key CHIP-8 keypad is mapped to the left side of the keyboard:

| Keys        | CHIP-8 keys |
|-------------|-------------|
| 1 2 3 4     | 0 1 2 3     |
| Q W E R     | 4 5 6 7     |
| A S D F     | 8 9 A B     |
| Z X C V     | C D E F     |

`chipate.app.key_for(name)` gives this mapping for a key name. It returns `None` for
keys that are not mapped. `chipate.app.pixel_rects(display, scale)` yields an
`(x, y, width, height)` rectangle for each lit pixel.

## Using it as a library

```python
from chipate.assembler import assemble
from chipate.cpu import Cpu

program = assemble(
    "LD $0, 05\n"
    "loop:ADD $0, 01\n"
    "JP loop\n"
)

cpu = Cpu()
cpu.load_program(program)
for _ in range(4):
    cpu.step()
print(cpu.v[0])  # 7
```

### `chipate.cpu`

- `Cpu()` creates a machine that has already been reset. `initialize()` resets it
  again: it clears the registers, memory, stack and display, loads the font at
  `0x050`, and sets `pc` to `0x200`.
- `load_program(data)` copies bytes to `0x200`. `read_rom(path)` does the same with
  the bytes of a file. A program that does not fit in memory raises `ValueError`.
- `fetch()` reads the next opcode. `decode()` executes it. `step()` does both.
- `set_key(key)` and `unset_key(key)` press and release a keypad key. The key must
  be from `0x0` to `0xF`, or `ValueError` is raised.
- `decrement_timers()` counts `delay_timer` and `sound_timer` down, and stops at zero.
- The state is open to read: `v`, `i`, `pc`, `sp`, `stack`, `memory`, `display`,
  `keypad`, `opcode`.

The interpreter runs these opcodes:

- `00E0` (clear)
- `1NNN`, `2NNN`
- `6XNN`, `7XNN`
- `8XY0`, `8XY1`, `8XY2`, `8XY3`
- `ANNN`
- `DXYN`
- `FX07`, `FX0A`, `FX15`, `FX18`, `FX1E`, `FX29`

`00EE` is accepted but does nothing.

Any opcode in the families `3`, `4`, `5`, `9`, `B`, `C` and `E` raises
`UnknownOpcodeError`.

### `chipate.assembler`

`assemble(text)` returns the byte code for the source text. An `Assembler` object
does the same work in steps: `parse(text)` or `compile(path)` reads the source, and
`generate()` returns the bytes. `generate()` raises `AssemblerError` when an operand
is missing or a number is not hexadecimal.

Syntax:

- Write one instruction on each line. Separate the parameters with commas.
- `;` starts a comment that runs to the end of the line.
- `name:` defines a label at the current address. `JP`, `CALL` and `LD I, …` can use
  it. Write the label directly in front of the mnemonic (`loop:ADD $0, 01`). A label
  on a line of its own still takes up one instruction slot when addresses are counted.
- Registers are written `$0` … `$F`. Immediate values and addresses are hexadecimal.
  For the immediate value of `SE` and `SNE`, the first character is skipped
  (`SE $0, #05`).
- These mnemonics are recognised: `CLS`, `RTS`, `LD`, `ADD`, `DRW`, `JP`, `CALL`,
  `SE`, `SNE`, `OR`, `AND`, `XOR`. Other mnemonics produce no bytes.

Note that `CLS` assembles to `000E`. The interpreter treats that as a no-op, so it
does not clear the display.

### `chipate.resource_dir`

`search_and_set_resource_dir(folder_name, app_dir=None)` looks for the folder in
several places, in this order:

1. the working directory
2. the application directory, which is the folder of the running script when
   `app_dir` is not given
3. up to three levels above the application directory

When the folder is found, it becomes the working directory and the function returns
`True`. Otherwise it returns `False`. The `chipate` command does not call this
function.

## Limitations

- There is no sound. `sound_timer` counts down but makes no beep.
- The interpreter covers only the subset of the instruction set listed above, so most
  ready-made CHIP-8 ROMs stop with `UnknownOpcodeError`.
- Subroutine return is not implemented.