# ninekit

A pure-Python toolkit for 9P file servers, plumber messages, a PDP-1
emulator and a few drawing helpers. It has no dependencies outside the
standard library.

## Modules

- `ninekit.wire`: little-endian encoders `put_u8`, `put_u16`, `put_u32`,
  `put_u64` and `put_string` (a 16-bit byte count followed by UTF-8 bytes),
  and a `Decoder` with `u8`, `u16`, `u32`, `u64`, `string`, `take`, `rest`
  and `remaining`. Errors raise `ProtocolError` (a `ValueError`).
- `ninekit.dir`: the 9P constants (`OREAD`, `QTDIR`, `DMDIR`, `NOFID`, ...),
  `Qid`, `Perm` (whose `str()` is an `ls -l` style mode string) and `Dir`
  stat records. `Dir.to_bytes()` encodes an entry, `unmarshal_dir` decodes
  one, and `null_dir()` returns a `Dir` whose fields mean "don't change" in
  a wstat.
- `ninekit.fcall`: 9P2000 messages. `FcallType` enumerates the message types;
  `Fcall.to_bytes()` encodes a message, `unmarshal_fcall` decodes one, and
  `read_fcall` / `write_fcall` move messages over a binary stream.
  `dumpsome` renders up to 64 bytes of data for display.
- `ninekit.client`: a 9P client. `Conn` negotiates the protocol version over
  any object with `read`, `write` and `close`; `Conn.attach` returns an
  `Fsys`, and `Conn.auth` opens an authentication fid. `Fid` offers `open`,
  `create`, `read`, `read_at`, `read_full`, `write`, `write_at`, `seek`,
  `walk`, `stat`, `wstat`, `remove`, `dirread`, `dirreadall` and `close`,
  and works as a context manager. `Fsys` provides `open`, `create`,
  `remove`, `stat`, `wstat` and `access` by path name. Errors returned by
  the server raise `ClientError`.
- `ninekit.dial`: `dial` and `mount` connect over `unix`, `tcp`, `tcp4` or
  `tcp6`; `dial_service` and `mount_service` connect to a service posted in
  the directory returned by `namespace()` (taken from `$NAMESPACE`, or built
  from `$USER` and `$DISPLAY`).
- `ninekit.plumb`: plumber `Message` and `Attribute` records.
  `Message.send` writes a message, `Message.recv` reads one without consuming
  anything past it, and `Message.lookup_attr` finds an attribute value.
  `quote_attribute` / `unquote_attribute` handle attribute quoting, and
  `open_port` opens a file of the mounted `plumb` service. Decoding errors
  raise `PlumbError`, `AttributeSyntaxError` or `QuoteError`.
- `ninekit.pdp1`: a PDP-1 `Machine` that loads octal "address<TAB>value"
  listings with `load` and runs one instruction per `step`, calling the
  given `Trapper`'s `trap` method for IOT instructions. A halt, an unknown
  instruction or an endless indirect chain raises `HaltError`,
  `UnknownInstrError` or `LoopError` (all `MachineError`). `norm` folds a
  value into an 18-bit ones-complement word.
- `ninekit.draw.pix`: `Color` values and named colours, channel specifiers
  `Chan`, and pixel formats `Pix` with `make_pix`, `parse_pix`, `str()` and
  `depth()`, plus the standard formats `GREY1` ... `XBGR32`.
- `ninekit.draw.rect`: `Point`, `Rectangle`, `rect_clip`, `rect_x_rect`,
  `rect_in_rect` and `combine_rect`.
- `ninekit.draw.rgb`: `cmap2rgb`, `cmap2rgba` and `rgb2cmap` for the
  standard 8-bit colour map.
- `ninekit.draw.icossin`: `int_cos_sin2(x, y)` returns the cosine and sine
  of a direction, each scaled by `ICOSSCALE` (1024).
- `ninekit.draw.fontname`: `parse_font_scale` splits names such as
  `"2*/lib/font/bit/lucm/unicode.9.font"`, and `subfont_name` finds the file
  for a subfont of a font.

## Installation

```
pip install .
```

## Example: reading a file over 9P

```python
from ninekit.dial import mount_service
from ninekit.dir import OREAD

fsys = mount_service("acme")
with fsys.open("index", OREAD) as fid:
    data = fid.read(8192)
print(data.decode())
print(fsys.stat("/index"))
```

## Example: plumber messages

```python
import io
from ninekit.plumb import Attribute, Message

msg = Message(src="plumb", dst="edit", dir="/home/user", type="text",
              attr=[Attribute("addr", "/root/")], data=b"/etc/hosts")
buf = io.BytesIO()
msg.send(buf)
buf.seek(0)
again = Message.recv(buf)
assert again.lookup_attr("addr") == "/root/"
```

## Example: the PDP-1

```python
from ninekit.pdp1 import HaltError, Machine

class NoDevices:
    def trap(self, y):
        pass

m = Machine()
m.load([" 0\t700005\n", " 1\t760400\n"])   # law 5; hlt
m.step(NoDevices())
assert m.ac == 5
try:
    m.step(NoDevices())
except HaltError as exc:
    print(exc)                                # executed HLT instruction at 000001
```

## Example: pixel formats

```python
from ninekit.draw.pix import parse_pix

p = parse_pix("r8g8b8")
print(str(p), p.depth())   # r8g8b8 24
```

## What the package does not do

- It is a 9P client only; there is no file server.
- `ninekit.draw` holds pure helpers. It does not connect to a display:
  there are no windows, images, font loading or rendering, mouse, keyboard
  or clipboard.
- The PDP-1 emulator has no screen or game front end; IOT instructions are
  handed to the `Trapper` you supply.
- There are no command-line programs.

## Running the tests

```
pip install .[test]
pytest
```