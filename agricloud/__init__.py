"""Farm monitoring core: data fusion, alerts, irrigation tracking and advisory plans."""
