"""
Streamlit Web Application for the Invoice Automation ROI Calculator
------------------------------------------------------------------

This application exposes a web form for the business inputs of an
accounts-payable team and shows the projected savings of automating
invoice processing.  It uses the same calculation, scenario store and
PDF report as the HTTP API: a projection can be saved under a scenario
name and its report downloaded from the page.

To run locally:

```
python -m streamlit run app.py
```

The scenario database is taken from ``ROI_DATABASE_URL`` (see
``settings.py``).
"""

import streamlit as st
import pandas as pd
import matplotlib.pyplot as plt

from calculator import calculate_results, savings_timeline
from errors import RoiCalculatorError
from report import render_report
from settings import load_settings
from store import store_from_url


@st.cache_resource
def get_store():
    return store_from_url(load_settings().database_url)


def main():
    st.set_page_config(page_title="Invoice Automation ROI Calculator", layout="centered")
    st.title("Invoice Automation ROI Calculator")
    store = get_store()

    with st.form(key="roi_form"):
        st.subheader("Current Process")
        monthly_invoice_volume = st.number_input("Monthly Invoice Volume", value=1000, step=100)
        num_ap_staff = st.number_input("Number of AP Staff", value=0, step=1)
        avg_hours_per_invoice = st.number_input("Average Hours per Invoice (Manual)", value=0.5, step=0.05)
        hourly_wage = st.number_input("Hourly Wage (USD)", value=25.0, step=1.0)
        st.subheader("Errors")
        error_rate_manual = st.number_input("Manual Error Rate (%)", value=2.0, step=0.1)
        error_cost = st.number_input("Error Fix Cost (USD)", value=50.0, step=5.0)
        st.subheader("Investment")
        time_horizon_months = st.number_input("Time Horizon (months)", value=12, step=1)
        one_time_implementation_cost = st.number_input("One-Time Implementation Cost (USD)", value=50000.0,
                                                       step=1000.0)
        st.subheader("Save")
        scenario_name = st.text_input("Scenario Name (optional)", value="")

        submit_button = st.form_submit_button(label="Calculate")

    if submit_button:
        inputs = {
            "monthly_invoice_volume": monthly_invoice_volume,
            "avg_hours_per_invoice": avg_hours_per_invoice,
            "hourly_wage": hourly_wage,
            "error_rate_manual": error_rate_manual,
            "error_cost": error_cost,
            "time_horizon_months": time_horizon_months,
            "one_time_implementation_cost": one_time_implementation_cost,
            "num_ap_staff": num_ap_staff if num_ap_staff > 0 else None,
        }
        results = calculate_results(inputs)
        st.success("Projection calculated.")
        # Display summary table
        summary_df = pd.DataFrame([
            {
                "Monthly Savings (USD)": results["monthly_savings"],
                "Cumulative Savings (USD)": results["cumulative_savings"],
                "Net Savings (USD)": results["net_savings"],
                "Payback (months)": results["payback_months"],
                "ROI": results["roi_percentage"],
            }
        ])
        st.subheader("Summary")
        st.table(summary_df.style.format({
            "Monthly Savings (USD)": "${:,.0f}",
            "Cumulative Savings (USD)": "${:,.0f}",
            "Net Savings (USD)": "${:,.0f}",
            "Payback (months)": "{:.1f}",
        }))
        timeline_df = savings_timeline(inputs)
        if not timeline_df.empty:
            st.subheader("Net Position over Time")
            fig, ax = plt.subplots()
            ax.plot(timeline_df["Month"], timeline_df["NetPosition"], marker='o')
            ax.axhline(0, color="grey", linewidth=1)
            ax.set_xlabel("Month")
            ax.set_ylabel("Cumulative Savings less Implementation Cost (USD)")
            ax.grid(True)
            st.pyplot(fig)
        # Save and offer the report
        if scenario_name:
            try:
                created = store.create(scenario_name, inputs)
            except RoiCalculatorError as exc:
                st.error(f"Could not save scenario: {exc}")
            else:
                st.success(f"Saved scenario '{created['name']}'.")
                pdf_bytes = render_report(store.get(created["id"]))
                st.download_button("Download Report (PDF)", data=pdf_bytes, file_name=f"{created['id']}.pdf",
                                   mime="application/pdf")

    scenarios = store.list()
    if scenarios:
        st.subheader("Saved Scenarios")
        st.table(pd.DataFrame(scenarios))


if __name__ == "__main__":
    main()
