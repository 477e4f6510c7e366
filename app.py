import time
import asyncio
import pandas as pd
from io import StringIO
import streamlit as st

from db.db_manager import DatabaseManager
from models.models import Product
from scraper import ScrapeOrchestrator

STATUS_LABELS = {
    "found_with_price": "✅ Price",
    "found_no_price": "🟡 No price",
    "no_info": "❌ Not found",
}

# --- PAGE CONFIG ---
st.set_page_config(page_title="VN Price Scout", page_icon="🏷️", layout="wide")

# Custom CSS for high-contrast dashboard elements
st.markdown("""
    <style>
    .main { background-color: #f4f7f6; }
    /* Custom Card Design */
    .metric-card {
        background-color: white;
        padding: 20px;
        border-radius: 12px;
        border-top: 5px solid #1E88E5;
        box-shadow: 0 4px 6px rgba(0,0,0,0.1);
        text-align: center;
    }
    .metric-label { font-size: 0.9rem; color: #555; font-weight: 600; text-transform: uppercase; }
    .metric-value { font-size: 1.8rem; color: #111; font-weight: 800; }
    </style>
    """, unsafe_allow_html=True)

# Helper function for custom metric cards
def render_custom_metric(label, value, border_color="#1E88E5"):
    st.markdown(f"""
        <div class="metric-card" style="border-top-color: {border_color};">
            <div class="metric-label">{label}</div>
            <div class="metric-value">{value}</div>
        </div>
    """, unsafe_allow_html=True)


def comparison_frame(records: pd.DataFrame) -> pd.DataFrame:
    """Pivot records into one row per SKU with a price column per supplier."""
    prices = records.pivot_table(index="sku", columns="supplier", values="price",
                                 aggfunc="first", dropna=False)
    prices = prices.reindex(records["sku"].unique())
    prices["Best Price"] = prices.min(axis=1)
    return prices.reset_index().rename(columns={"sku": "SKU"})


def highlight_best_price(row):
    styles = []
    for col in row.index:
        if col not in ("SKU", "Best Price") and pd.notna(row[col]) and row[col] == row.get("Best Price"):
            styles.append('background-color: #A7F3D0; color: #064E3B; font-weight: bold')
        else:
            styles.append('')
    return styles


db = DatabaseManager()

st.title("🏷️ Bosch Appliance Price Scout")
st.divider()

tab_scrape, tab_history = st.tabs(["🔍 Scrape SKUs", "🗂️ Session History"])

# --- TAB 1: AD-HOC SCRAPE ---
with tab_scrape:
    col_input, col_upload = st.columns([2, 2])
    with col_input:
        sku_text = st.text_area("SKUs (one per line):", placeholder="SMS6ZCI49E\nPUE611BB5E")
    with col_upload:
        uploaded_file = st.file_uploader("…or upload a CSV", type=['csv'])

    skus = [s.strip() for s in sku_text.splitlines() if s.strip()]
    if uploaded_file is not None:
        df_upload = pd.read_csv(StringIO(uploaded_file.read().decode('utf-8-sig')))
        col_to_use = next((c for c in ['sku', 'code', 'name'] if c in df_upload.columns), None)
        if col_to_use is None:
            st.error("❌ CSV must contain 'sku', 'code' or 'name' column")
            st.stop()
        skus += [str(s).strip() for s in df_upload[col_to_use].dropna() if str(s).strip()]

    save_run = st.checkbox("Save session to database", value=True)

    if st.button("🚀 Fetch Prices", type="primary") and skus:
        start_time = time.time()
        with st.spinner(f"Scraping {len(skus)} SKUs from 3 suppliers..."):
            run = asyncio.run(ScrapeOrchestrator().run(
                [Product(code=sku) for sku in dict.fromkeys(skus)],
                db.get_all_suppliers(),
            ))
        if save_run:
            db.save_scrape_run(run)
        elapsed_time = time.time() - start_time

        session = run.session
        success_rate = session.success_count / session.total_results * 100 if session.total_results else 0

        st.divider()
        st.subheader("📊 Processing Insights")
        c1, c2, c3, c4 = st.columns(4)
        with c1: render_custom_metric("Total SKUs", session.total_products, "#1E88E5")
        with c2: render_custom_metric("Prices Found", session.success_count, "#43A047")
        with c3:
            rate_color = "#43A047" if success_rate > 80 else "#FB8C00"
            render_custom_metric("Success Rate", f"{success_rate:.1f}%", rate_color)
        with c4: render_custom_metric("Time Taken", f"{elapsed_time:.1f}s", "#757575")

        df_records = pd.DataFrame([r.model_dump(mode="json") for r in run.records])
        df_final = comparison_frame(df_records)

        st.markdown("### 📋 Comparative Results")
        st.dataframe(
            df_final.style.apply(highlight_best_price, axis=1)
                    .format("{:,.0f}₫", na_rep="-", subset=[c for c in df_final.columns if c != "SKU"]),
            width='stretch'
        )

        df_records["status"] = df_records["status"].map(STATUS_LABELS)
        with st.expander("All records"):
            st.dataframe(
                df_records[["sku", "supplier", "product_name", "price_formatted", "status", "url_scraped"]],
                column_config={"url_scraped": st.column_config.LinkColumn()},
                width='stretch', hide_index=True
            )

        st.download_button("📥 Export Results", df_final.to_csv(index=False), "results.csv", "text/csv")

# --- TAB 2: STORED SESSIONS ---
with tab_history:
    sessions = db.get_sessions(limit=50)
    if not sessions:
        st.info("No sessions stored yet.")
    else:
        df_sessions = pd.DataFrame(sessions)
        st.dataframe(df_sessions, width='stretch', hide_index=True)

        session_id = st.selectbox("Session", df_sessions["session_id"])
        records = db.get_records_by_session(session_id)
        if records:
            df_records = pd.DataFrame(records)
            df_final = comparison_frame(df_records)
            st.dataframe(
                df_final.style.apply(highlight_best_price, axis=1)
                        .format("{:,.0f}₫", na_rep="-", subset=[c for c in df_final.columns if c != "SKU"]),
                width='stretch'
            )
