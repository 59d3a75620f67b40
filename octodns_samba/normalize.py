#
#
#

"""Value normalization helpers.

These are only used to compare values. Nothing returned from here is ever
sent to samba-tool, with the exception of `format_txt_for_delete`, which
produces the quoting `samba-tool dns delete` expects for TXT records.
"""

from ipaddress import IPv6Address, ip_address


def normalize_ipv6(value):
    """Expand an IPv6 address to its full form for comparison.

    e.g., "2001:db8::1" -> "2001:0db8:0000:0000:0000:0000:0000:0001"

    IPv4 and IPv4-mapped addresses and anything unparseable are returned
    unchanged.
    """
    try:
        address = ip_address(value)
    except ValueError:
        return value
    if not isinstance(address, IPv6Address) or address.ipv4_mapped:
        return value
    return address.exploded


def strip_trailing_dot(value):
    if value.endswith('.'):
        return value[:-1]
    return value


def format_txt_for_delete(value):
    """Convert a TXT value from query format to delete format.

    Query returns: "string1","string2"
    Delete needs:  'string1' 'string2'
    """
    parts = []
    for part in value.split(','):
        part = part.strip().strip('"')
        parts.append(f"'{part}'")
    return ' '.join(parts)
