"""Reshaping small XML (and CSV) documents with ElementTree."""

from __future__ import annotations

import copy
import csv
import io
import xml.etree.ElementTree as ET
from typing import Union

XmlSource = Union[str, ET.Element]


def _to_string(element: ET.Element, pretty: bool = True) -> str:
    if pretty:
        element = copy.deepcopy(element)
        ET.indent(element, space="  ")
    return ET.tostring(element, encoding="unicode")


def _text(element: ET.Element, path: str) -> str:
    found = element.find(path)
    if found is None:
        raise ValueError(f"Missing <{path}> in <{element.tag}>")
    return "".join(found.itertext())


def create_hierarchy(xml_representation: str) -> str:
    """Group ``Root/Data`` rows by ``Category``, keeping Quantity and Price."""

    source = ET.fromstring(xml_representation)
    groups: dict[str, ET.Element] = {}
    result = ET.Element("Root")
    for data in source.findall("Data"):
        category = _text(data, "Category")
        group = groups.get(category)
        if group is None:
            group = ET.SubElement(result, "Group", {"ID": category})
            groups[category] = group
        row = ET.SubElement(group, "Data")
        for name in ("Quantity", "Price"):
            child = data.find(name)
            if child is not None:
                row.append(copy.deepcopy(child))
    return _to_string(result)


def _namespace_for_prefix(xml_representation: str, prefix: str) -> str:
    for _, (ns_prefix, uri) in ET.iterparse(io.StringIO(xml_representation), events=("start-ns",)):
        if ns_prefix == prefix:
            return uri
    raise ValueError(f"Namespace prefix '{prefix}' is not declared")


def get_purchase_orders(xml_representation: str, prefix: str = "aw") -> str:
    """Comma separated numbers of purchase orders shipped to NY."""

    ns = "{" + _namespace_for_prefix(xml_representation, prefix) + "}"
    root = ET.fromstring(xml_representation)
    numbers: list[str] = []
    for order in root.findall(f"{ns}PurchaseOrder"):
        for address in order.findall(f"{ns}Address"):
            state = address.find(f"{ns}State")
            if address.get(f"{ns}Type") == "Shipping" and state is not None and state.text == "NY":
                numbers.append(order.get(f"{ns}PurchaseOrderNumber", ""))
    return ",".join(numbers)


_CUSTOMER_FIELDS = ("CompanyName", "ContactName", "ContactTitle", "Phone")
_ADDRESS_FIELDS = ("Address", "City", "Region", "PostalCode", "Country")


def read_customers_from_csv(customers: str) -> str:
    """Turn ``id,company,contact,title,phone,address,city,region,postal,country`` rows into XML."""

    root = ET.Element("Root")
    for row in csv.reader(io.StringIO(customers)):
        if not row:
            continue
        expected = 1 + len(_CUSTOMER_FIELDS) + len(_ADDRESS_FIELDS)
        if len(row) < expected:
            raise ValueError(f"Customer row needs {expected} columns, got {len(row)}: {row}")
        customer = ET.SubElement(root, "Customer", {"CustomerID": row[0]})
        for offset, name in enumerate(_CUSTOMER_FIELDS, start=1):
            ET.SubElement(customer, name).text = row[offset]
        full_address = ET.SubElement(customer, "FullAddress")
        for offset, name in enumerate(_ADDRESS_FIELDS, start=1 + len(_CUSTOMER_FIELDS)):
            ET.SubElement(full_address, name).text = row[offset]
    return _to_string(root)


def get_concatenation_string(xml_representation: str) -> str:
    """Concatenate every text node of the document in document order."""

    return "".join(ET.fromstring(xml_representation).itertext())


def replace_all_customers_with_contacts(xml_representation: str) -> str:
    """Rebuild the root with a ``contact`` for every ``customer`` child.

    Attributes and any non-customer content of the root are dropped.
    """

    source = ET.fromstring(xml_representation)
    result = ET.Element(source.tag)
    for customer in source.findall("customer"):
        contact = ET.SubElement(result, "contact")
        contact.extend(copy.deepcopy(child) for child in customer)
    return _to_string(result)


def find_channels_ids(xml_representation: str) -> list[int]:
    """Ids of channels with two or more subscribers and a ``DELETE`` comment."""

    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
    root = ET.fromstring(xml_representation, parser=parser)
    ids: list[int] = []
    for channel in root.findall("channel"):
        subscribers = channel.findall("subscriber")
        marked = any(child.tag is ET.Comment and child.text == "DELETE" for child in channel)
        if len(subscribers) > 1 and marked:
            ids.append(int(channel.get("id", "")))
    return ids


def sort_customers(xml_representation: str) -> str:
    """Order customers by ``FullAddress/Country`` then ``FullAddress/City``."""

    source = ET.fromstring(xml_representation)
    ordered = sorted(
        source,
        key=lambda customer: (
            _text(customer, "FullAddress/Country"),
            _text(customer, "FullAddress/City"),
        ),
    )
    result = ET.Element("Root")
    result.extend(copy.deepcopy(customer) for customer in ordered)
    return _to_string(result)


def get_flatten_string(xml_representation: XmlSource) -> str:
    """Serialise without indentation: ``<root><element>something</element></root>``."""

    if isinstance(xml_representation, str):
        element = ET.fromstring(xml_representation)
    else:
        element = copy.deepcopy(xml_representation)
    for node in element.iter():
        if node.text is not None and not node.text.strip():
            node.text = None
        if node.tail is not None and not node.tail.strip():
            node.tail = None
    return _to_string(element, pretty=False)


def get_orders_value(xml_representation: str) -> int:
    """Sum the value of every ordered product, priced from ``products``."""

    root = ET.fromstring(xml_representation)
    prices = {
        product.get("Id"): int(product.get("Value", "0"))
        for products in root.findall("products")
        for product in products
    }
    total = 0
    for reference in root.findall("Orders/Order/product"):
        key = (reference.text or "").strip()
        if key not in prices:
            raise KeyError(f"Unknown product id: {key}")
        total += prices[key]
    return total


__all__ = [
    "create_hierarchy",
    "find_channels_ids",
    "get_concatenation_string",
    "get_flatten_string",
    "get_orders_value",
    "get_purchase_orders",
    "read_customers_from_csv",
    "replace_all_customers_with_contacts",
    "sort_customers",
]
