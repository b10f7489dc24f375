# ssrtools

`ssrtools` is a set of small building blocks for a proxy server.

- `ssrtools.jsonparser` parses JSON configuration text with `parse()` and
  `parse_ex()`. It is a little looser than strict JSON: trailing commas are
  accepted and unknown escapes stand for the escaped character. Through
  `JsonSettings` you can turn on `//` and `/* */` comments
  (`enable_comments`) and cap the memory a parse may account for
  (`max_memory`, 0 for no limit). A failed parse raises `JsonParseError`,
  which is a `ValueError` and carries `message`, `line` and `column`.
- `ssrtools.jsonvalue` holds the parsed trees. `JsonValue` has a
  `JsonType`. Item lookup (`value["name"]`, `value[0]`) never raises: a
  missing entry gives a value of type `JsonType.NONE`. The accessors are
  `as_str()`, `as_int()`, `as_float()` and `bool()`, and `to_python()`
  converts a tree to plain dicts, lists and scalars.
- `ssrtools.obfsutil` has `get_head_size()`, which gives the size of a
  SOCKS-style address header (IPv4, IPv6 or domain name), and
  `XorShift128Plus`, the xorshift128+ pseudo-random generator.
- `ssrtools.linkedlist` has `LinkedList`. It can add at either end, delete
  by predicate (`delete_node`) or by index (`delete_at`, which raises
  `IndexError` when out of range), modify in place, test membership with
  `have_same` and `have_same_cmp`, call a function on every element with
  `foreach`, and selection-sort with a "greater than" predicate.
- `ssrtools.rule` has `Rule` and `RuleList`, which match host names against
  regular expressions. `RuleList.lookup()` returns the first rule that
  matches. A bad argument or pattern raises `RuleError`.
- `ssrtools.netutils` has `SockAddr`, an IPv4/IPv6 address with a port, and
  these functions: `get_sockaddr()` takes an IP literal or resolves a name,
  with an IPv4 or IPv6 preference and optional retrying;
  `sockaddr_cmp()` and `sockaddr_cmp_addr()` order addresses;
  `bind_to_address()`, `set_reuseport()` and `get_sockaddr_len()` work on
  sockets; `validate_hostname()` checks a DNS name.
- `ssrtools.resolv` has `Resolver`, which looks up A and/or AAAA records in
  background threads. Lookups use dnspython unless you pass your own `lookup`
  function. Each query hands the address picked by `choose_address()` to a
  callback according to the `ResolvMode`. A query can be cancelled, and
  `shutdown()` stops the resolver.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Examples

Parse a configuration document that contains a comment:

```python
from ssrtools.jsonparser import JsonSettings, parse

settings = JsonSettings(enable_comments=True)
config = parse(b'{"server_port": 8388, // listen port\n "timeout": 60}', settings)
print(config["server_port"].as_int())   # 8388
print(config.to_python())               # {'server_port': 8388, 'timeout': 60}
```

Check a host name, and match it against rules:

```python
from ssrtools.netutils import validate_hostname
from ssrtools.rule import Rule, RuleList

assert validate_hostname("www.example.com")

rules = RuleList()
rule = Rule()
rule.accept_arg(r"\.example\.com$")
rule.init()
rules.add(rule)
print(rules.lookup("www.example.com") is rule)  # True
```

Resolve a name, here with a stand-in lookup function so that no network is
needed:

```python
import socket
import threading

from ssrtools.resolv import Resolver

def fake_lookup(name, family):
    return ["192.0.2.1"] if family == socket.AF_INET else ["2001:db8::1"]

done = threading.Event()

def on_result(addr):
    print(addr.host if addr else None)   # 2001:db8::1
    done.set()

with Resolver(ipv6first=True, lookup=fake_lookup) as resolver:
    resolver.query("example.com", on_result, port=443)
    done.wait()
```

Generate pseudo-random numbers:

```python
from ssrtools.obfsutil import XorShift128Plus

rng = XorShift128Plus()
rng.seed(12345)
print(rng.next())
```

## What this package does not do

This is a library of parts, not a proxy. It has no command to run, no
listening server or connection relay, no traffic encryption, and no
obfuscation or protocol plugins beyond the two helpers in
`ssrtools.obfsutil`.