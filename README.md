# spongetcp

Building blocks for a user-space TCP implementation, in plain Python with no
third-party runtime dependencies.

## What is inside

- `spongetcp.wrapping_integers`: `WrappingInt32` with `wrap` and `unwrap`, which convert
  between absolute 64-bit sequence numbers and 32-bit TCP sequence numbers.
- `spongetcp.byte_stream`: `ByteStream`, a finite, flow-controlled in-memory byte stream
  with a fixed capacity.
- `spongetcp.stream_reassembler`: `StreamReassembler`, which accepts substrings that may
  arrive out of order or overlap and writes them in order into a `ByteStream`.
- `spongetcp.tcp_receiver`: `TCPReceiver`, which feeds incoming `TCPSegment`s into a byte
  stream and reports the `ackno()` and `window_size()` to advertise.
- `spongetcp.tcp_header` and `spongetcp.tcp_segment`: `TCPHeader` and `TCPSegment`, which
  parse and serialize TCP segments with the Internet checksum. Parsing failures raise
  `spongetcp.parser.ParseError`, whose `result` is a `ParseResult`.
- `spongetcp.parser`, `spongetcp.buffer`, `spongetcp.util`: `NetParser`, `NetUnparser`,
  `Buffer`, `BufferList`, `BufferViewList`, `InternetChecksum`, `hexdump`, `timestamp_ms`,
  `get_random_generator`, and the `TaggedError` / `UnixError` exceptions.
- `spongetcp.tcp_state`: `receiver_state_summary` and `sender_state_summary`, returning
  members of `TCPReceiverStateSummary` and `TCPSenderStateSummary`.
- `spongetcp.tcp_config`: `TCPConfig` and `FdAdapterConfig` settings dataclasses.
- `spongetcp.address`, `spongetcp.file_descriptor`, `spongetcp.eventloop`,
  `spongetcp.sockets`: IPv4 `Address`, reference-counted `FileDescriptor`, a poll-based
  `EventLoop`, and the `UDPSocket`, `TCPSocket` and `LocalStreamSocket` wrappers.

## Install

```
pip install .
```

## Examples

Converting sequence numbers:

```python
from spongetcp.wrapping_integers import WrappingInt32, wrap, unwrap

isn = WrappingInt32(15)
seqno = wrap(3 * (1 << 32) + 17, isn)         # WrappingInt32(raw_value=32)
absolute = unwrap(seqno, isn, 3 * (1 << 32))  # 3 * 2**32 + 17
```

Reassembling a stream:

```python
from spongetcp.stream_reassembler import StreamReassembler

reassembler = StreamReassembler(65000)
reassembler.push_substring(b"b", 1, False)
reassembler.push_substring(b"a", 0, False)
print(reassembler.stream_out().read(2))   # b'ab'
```

Receiving segments:

```python
from spongetcp.tcp_receiver import TCPReceiver
from spongetcp.tcp_segment import TCPSegment
from spongetcp.wrapping_integers import WrappingInt32

receiver = TCPReceiver(4000)
syn = TCPSegment()
syn.header.syn = True
syn.header.seqno = WrappingInt32(0)
receiver.segment_received(syn)
print(receiver.ackno())   # 1
```

## What the package does not do

There is no TCP sender and no full TCP connection here, so nothing sends data segments,
retransmits or manages a connection's lifetime. `sender_state_summary` works on any
object that provides `stream_in()`, `next_seqno_absolute()` and `bytes_in_flight()`.
There is no command-line program and no TUN/TAP device support.

## Running the tests

```
pip install ".[test]"
pytest
```