from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from throttled_fetch.katas import xml_transforms as xt


def test_create_hierarchy_groups_by_category() -> None:
    source = """
    <Root>
      <Data><Category>A</Category><Quantity>3</Quantity><Price>24.50</Price></Data>
      <Data><Category>B</Category><Quantity>1</Quantity><Price>89.99</Price></Data>
      <Data><Category>A</Category><Quantity>5</Quantity><Price>4.95</Price></Data>
    </Root>
    """
    root = ET.fromstring(xt.create_hierarchy(source))

    groups = root.findall("Group")
    assert [group.get("ID") for group in groups] == ["A", "B"]
    assert [data.findtext("Quantity") for data in groups[0]] == ["3", "5"]
    assert groups[1].find("Data/Category") is None
    assert groups[1].findtext("Data/Price") == "89.99"


def test_get_purchase_orders_filters_ny_shipping() -> None:
    source = """
    <aw:PurchaseOrders xmlns:aw="http://www.adventure-works.com">
      <aw:PurchaseOrder aw:PurchaseOrderNumber="99301">
        <aw:Address aw:Type="Shipping"><aw:State>NY</aw:State></aw:Address>
        <aw:Address aw:Type="Billing"><aw:State>CA</aw:State></aw:Address>
      </aw:PurchaseOrder>
      <aw:PurchaseOrder aw:PurchaseOrderNumber="99298">
        <aw:Address aw:Type="Shipping"><aw:State>CA</aw:State></aw:Address>
        <aw:Address aw:Type="Billing"><aw:State>NY</aw:State></aw:Address>
      </aw:PurchaseOrder>
      <aw:PurchaseOrder aw:PurchaseOrderNumber="99189">
        <aw:Address aw:Type="Shipping"><aw:State>NY</aw:State></aw:Address>
      </aw:PurchaseOrder>
    </aw:PurchaseOrders>
    """
    assert xt.get_purchase_orders(source) == "99301,99189"


def test_get_purchase_orders_requires_prefix() -> None:
    with pytest.raises(ValueError):
        xt.get_purchase_orders("<Orders/>")


def test_read_customers_from_csv() -> None:
    csv_text = (
        "ALFKI,Alfreds Futterkiste,Maria Anders,Sales Representative,030-0074321,"
        "Obere Str. 57,Berlin,,12209,Germany\n"
        "\n"
        'ANATR,"Ana Trujillo, Emparedados",Ana Trujillo,Owner,(5) 555-4729,'
        "Avda. de la Constitucion 2222,Mexico D.F.,,05021,Mexico\n"
    )
    root = ET.fromstring(xt.read_customers_from_csv(csv_text))

    customers = root.findall("Customer")
    assert [customer.get("CustomerID") for customer in customers] == ["ALFKI", "ANATR"]
    assert customers[0].findtext("ContactName") == "Maria Anders"
    assert customers[0].findtext("FullAddress/City") == "Berlin"
    assert customers[0].findtext("FullAddress/Region") == ""
    assert customers[1].findtext("CompanyName") == "Ana Trujillo, Emparedados"


def test_read_customers_from_csv_short_row() -> None:
    with pytest.raises(ValueError):
        xt.read_customers_from_csv("ALFKI,Alfreds\n")


def test_get_concatenation_string() -> None:
    source = (
        "<Document><Sentence><Word>Hello</Word><Punctuation>,</Punctuation>"
        "<Word> world</Word><Punctuation>!</Punctuation></Sentence></Document>"
    )
    assert xt.get_concatenation_string(source) == "Hello, world!"


def test_replace_all_customers_with_contacts() -> None:
    source = (
        '<Document kind="crm"><customer><name>John</name><phone>1</phone></customer>'
        "<customer><name>Jane</name></customer></Document>"
    )
    root = ET.fromstring(xt.replace_all_customers_with_contacts(source))

    assert root.tag == "Document"
    assert root.attrib == {}
    assert [child.tag for child in root] == ["contact", "contact"]
    assert [child.tag for child in root[0]] == ["name", "phone"]
    assert root[1].findtext("name") == "Jane"


def test_find_channels_ids() -> None:
    source = """
    <service>
      <channel id="1"><subscriber/><subscriber/><!--DELETE--></channel>
      <channel id="2"><subscriber/><!--DELETE--></channel>
      <channel id="3"><subscriber/><subscriber/><subscriber/></channel>
      <channel id="4"><!--keep--><subscriber/><subscriber/></channel>
      <channel id="5"><subscriber/><!--DELETE--><subscriber/></channel>
    </service>
    """
    assert xt.find_channels_ids(source) == [1, 5]


def test_sort_customers_by_country_then_city() -> None:
    def customer(cid: str, country: str, city: str) -> str:
        return (
            f'<Customer CustomerID="{cid}"><FullAddress><City>{city}</City>'
            f"<Country>{country}</Country></FullAddress></Customer>"
        )

    source = "<Root>" + "".join(
        [
            customer("C1", "USA", "Seattle"),
            customer("C2", "Germany", "Munich"),
            customer("C3", "Germany", "Berlin"),
            customer("C4", "Argentina", "Buenos Aires"),
        ]
    ) + "</Root>"
    root = ET.fromstring(xt.sort_customers(source))
    assert [c.get("CustomerID") for c in root] == ["C4", "C3", "C2", "C1"]


def test_get_flatten_string() -> None:
    pretty = """
    <root>
        <element>something</element>
    </root>
    """
    assert xt.get_flatten_string(pretty) == "<root><element>something</element></root>"
    assert xt.get_flatten_string(ET.fromstring(pretty)) == "<root><element>something</element></root>"


def test_get_orders_value() -> None:
    source = """
    <Root>
      <products>
        <product Id="1" Value="10"/>
        <product Id="2" Value="25"/>
      </products>
      <Orders>
        <Order><product>1</product><product>2</product></Order>
        <Order><product>2</product></Order>
      </Orders>
    </Root>
    """
    assert xt.get_orders_value(source) == 60


def test_get_orders_value_unknown_product() -> None:
    source = "<Root><products/><Orders><Order><product>9</product></Order></Orders></Root>"
    with pytest.raises(KeyError):
        xt.get_orders_value(source)
