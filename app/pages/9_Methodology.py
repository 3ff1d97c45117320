import streamlit as st

st.set_page_config(page_title="Methodology", layout="wide")
st.title("Methodology")

st.markdown(
    r"""
### Timeline

- Timeframe \([s, e]\), duration \(d = e - s + 1\).
- Ramp-up months \(s \ldots s+u-1\), plateau \(s+u \ldots e-r\), ramp-down \(e-r+1 \ldots e\).

### Ramp value

- For step \(k\) of an \(n\)-month ramp to peak \(m\):
  \[
  \text{crew} = \max\left(1, \operatorname{round}\left(\frac{m \cdot k}{n}\right)\right)
  \]
- Ramp-up uses \(k = 1 \ldots u\); ramp-down uses \(k = r-1 \ldots 0\).
- Any month inside the timeframe is at least 1 when \(m > 0\).

### Ramp fitting

- Ramps must leave a plateau: \(u + r < d\).
- Otherwise \(u + r\) is cut to \(d - 1\), split in the ratio \(u : r\) (largest remainder,
  ramp-up wins ties), with each non-zero ramp kept at >= 1 month.

### Cost

- Monthly labor cost:
  \[
  \text{cost}_t = \sum_i \text{crew}_{i,t} \cdot \text{rate}_i
  \]
"""
)
