# demogobbler

Building blocks for reading and writing the binary data found in
Source engine demo files: bit-exact streams, a growable bit writer, a
buffered file reader, an in-memory byte stream, a block arena and
small fixed-capacity hash tables.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

- `demogobbler.bitstream` holds `BitStream`, a least-significant-bit-first
  reader over a byte buffer. It reads unsigned and signed integers of
  0 to 64 bits (`read_uint`, `read_sint`, `read_uint32`, `read_sint32`),
  single bits, floats, NUL-terminated strings (`read_cstring`, which
  returns `bytes` without the terminator), fixed-size strings, var-ints
  (`read_varuint32`) and the engine's packed encodings (`read_bitcoord`,
  `read_coordvector`, `read_bitvector`, `read_bitcoordmp`,
  `read_bitcellcoord`, `read_bitnormal`, `read_ubitint`, `read_ubitvar`,
  `read_field_index`). A read past the end sets the stream's `overflow`
  flag and returns zero instead of raising. `fork_and_advance` returns a
  stream over the next bits and skips them.
- `demogobbler.bitwriter` holds `BitWriter`, the mirror image of
  `BitStream`. Its buffer grows as needed; `getvalue()` returns the
  bytes written so far, and `write_bitstream` copies the unread bits of
  a `BitStream`.
- `demogobbler.coords` holds the frozen value types both sides share:
  `BitCoord`, `BitCoordVector`, `BitAngleVector`, `BitCellCoord`,
  `BitCoordMp` and `BitNormal`, plus the bit-width constants.
- `demogobbler.filereader` holds `FileReader`, a chunk-buffered reader
  over a binary file object, with `read`, `skip`, `skip_to`, `position`,
  `read_int32`, `read_byte`, `read_float` and `read_vector`. The typed
  reads raise `EOFError` when the stream runs out; skipping backwards
  raises `ValueError`.
- `demogobbler.memory_stream` holds `MemoryStream`, a growable in-memory
  byte stream with `read`, `seek`, `write`, `fill_with_file` and
  `getvalue`. Given a `ground_truth` stream it compares every write
  against it, clears `agrees` on the first mismatch and reports it once
  through `on_error`.
- `demogobbler.arena` holds `Arena`, a block allocator that hands out
  aligned `Allocation`s (use `view()` for a writable `memoryview`),
  reallocates the most recent allocation in place when it fits, and
  can be cleared for reuse or used as a context manager.
- `demogobbler.hashtable` holds `HashTable`, a fixed-capacity
  string-keyed table that raises `HashTableFull` when no slot is left,
  and `PropExcludeSet`, a set of `ExcludeProp` exclusions looked up by
  table and prop name.

## Example

```python
from demogobbler.bitwriter import BitWriter
from demogobbler.bitstream import BitStream

writer = BitWriter()
writer.write_uint(0b10101, 5)
writer.write_varuint32(300)
writer.write_cstring("hello")

stream = BitStream(writer.getvalue(), writer.bitoffset)
assert stream.read_uint(5) == 0b10101
assert stream.read_varuint32() == 300
assert stream.read_cstring(80) == b"hello"
```

## What this package does not do

It does not parse or write whole demo files: there is no header,
packet, data table, string table or entity parsing, no demo splicing
or conversion, and no command-line tool. It provides only the
lower-level readers, writers and containers listed above.