"""
Streamlit price explorer for the catalog pricing engine.

Features:
- Customer group and quantity selection
- Price summary, price index values and volume offers per product
- Tier resolution trace
- Catalog table with resolved prices for the selected group
"""
import streamlit as st
import pandas as pd

from catalog_pricing.config.settings import get_settings
from catalog_pricing.data.catalog_store import CatalogStore
from catalog_pricing.pricing_engine import PricingEngine


st.set_page_config(
    page_title="Catalog Price Explorer",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_catalog():
    """Get cached catalog."""
    return CatalogStore.load(get_settings())


@st.cache_resource
def get_engine():
    """Get cached engine instance."""
    return PricingEngine.from_catalog(get_catalog(), get_settings())


try:
    catalog = get_catalog()
    engine = get_engine()
except Exception as e:
    st.error(f"System Error: {e}")
    st.stop()


# ============================================================================
# SIDEBAR: Customer Context
# ============================================================================
with st.sidebar:
    st.header("Customer Context")

    customer_group_id = st.number_input(
        "Customer Group",
        min_value=0,
        value=get_settings().default_customer_group_id,
        step=1
    )
    quantity = st.number_input("Quantity", min_value=1, value=1, step=1)

    st.divider()
    st.caption(f"{len(catalog.products)} products loaded")
    st.caption("Tax inclusive" if get_settings().tax_inclusive else "Tax exclusive")


# ============================================================================
# MAIN: Product Prices
# ============================================================================
st.title("Catalog Price Explorer")

tab_product, tab_catalog = st.tabs(["Product", "Catalog"])

with tab_product:
    options = {f"{p.sku} - {p.name}": p for p in catalog.products.values()}
    if not options:
        st.warning("Catalog is empty")
    else:
        label = st.selectbox("Product", list(options.keys()))
        product = options[label]

        with engine.scope(int(customer_group_id)):
            facade = engine.price_for(product)
            summary = facade.product_prices()
            price, trace = facade.final_price_with_trace(int(quantity))
            offers = facade.offer_line_texts()
            index_values = {
                "Minimal": facade.minimal_price(),
                "Regular Minimal": facade.regular_minimal_price(),
                "Maximal": facade.maximal_price(),
                "Regular Maximal": facade.regular_maximal_price(),
            }
            has_discount = facade.has_discount()
            saleable = engine.is_saleable(product)

        col1, col2, col3 = st.columns(3)
        col1.metric("Regular Price", summary.regular_price.formatted_price)
        col2.metric("Final Price", summary.final_price.formatted_price,
                    delta="On sale" if summary.on_sale else None)
        col3.metric(f"Unit Price @ {int(quantity)}", engine.currency.format(price))

        if not saleable:
            st.warning("Product is not saleable")
        if has_discount:
            st.success("Discounted for this customer group")

        st.subheader("Price Index")
        st.dataframe(pd.DataFrame([index_values]), hide_index=True)

        st.subheader("Offers")
        if offers:
            for offer in offers:
                st.markdown(f"- {offer}")
        else:
            st.caption("No volume offers")

        with st.expander("Resolution Details"):
            for t in trace:
                if t.value:
                    st.caption(f"**{t.step}**: {t.description} = `{t.value}`")
                else:
                    st.caption(f"**{t.step}**: {t.description}")

with tab_catalog:
    rows = []
    with engine.scope(int(customer_group_id)):
        for p in catalog.products.values():
            rows.append({
                "ID": p.id,
                "SKU": p.sku,
                "Name": p.name,
                "Type": p.type,
                "Status": p.status.value,
                "Base Price": p.price,
                "Unit Price": engine.final_price(p, int(quantity)),
            })
    st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True)
