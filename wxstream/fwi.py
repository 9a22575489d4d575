"""
Canadian Fire Weather Index (FWI) System equations.

Pure functions for the moisture codes and fire behaviour indices of the
Canadian Forest Fire Weather Index System. Every function depends only on
its arguments; the day-to-day carry of FFMC, DMC and DC is handled by the
weather stream that calls them.

References
----------
- Van Wagner, C.E. (1977). A method of computing fine fuel moisture content
  throughout the diurnal cycle. Information Report PS-X-69.
- Van Wagner, C.E. (1987). Development and Structure of the Canadian
  Forest Fire Weather Index System. Forestry Technical Report 35.
- Van Wagner, C.E. & Pickett, T.L. (1985). Equations and FORTRAN program
  for the Canadian Forest Fire Weather Index System. Forestry Technical
  Report 33.
- Wang, X. et al. (2017). cffdrs: an R package for the Canadian Forest
  Fire Danger Rating System. Ecological Processes 6.
"""

from __future__ import annotations

import logging

import numpy as np

logger = logging.getLogger(__name__)

# Moisture conversion coefficients for the FF scale
FFMC_COEFFICIENT = 147.2
PRECISE_FFMC_COEFFICIENT = 250.0 * 59.5 / 101.0

# Effective day-length factors for DMC, by month (46N)
DMC_DAY_LENGTH = {
    1: 6.5, 2: 7.5, 3: 9.0, 4: 12.8, 5: 13.9, 6: 13.9,
    7: 12.4, 8: 10.9, 9: 9.4, 10: 8.0, 11: 7.0, 12: 6.0,
}

# Day-length adjustment for DC, by month
DC_DAY_LENGTH = {
    1: -1.6, 2: -1.6, 3: -1.6, 4: 0.9, 5: 3.8, 6: 5.8,
    7: 6.4, 8: 5.0, 9: 2.4, 10: 0.4, 11: -1.6, 12: -1.6,
}


# =============================================================================
# Moisture Conversions
# =============================================================================


def ffmc_to_moisture(ffmc: float, coefficient: float = FFMC_COEFFICIENT) -> float:
    """Convert an FFMC value to fine fuel moisture content (percent)."""
    ffmc = float(np.clip(float(ffmc), 0.0, 101.0))
    return coefficient * (101.0 - ffmc) / (59.5 + ffmc)


def moisture_to_ffmc(moisture: float, coefficient: float = FFMC_COEFFICIENT) -> float:
    """Convert fine fuel moisture content (percent) back to FFMC."""
    ffmc = 59.5 * (250.0 - moisture) / (coefficient + moisture)
    return float(np.clip(ffmc, 0.0, 101.0))


def _equilibrium_moisture(temperature: float, relative_humidity: float) -> tuple[float, float]:
    """Return the drying (ed) and wetting (ew) equilibrium moisture contents."""
    common = 0.18 * (21.1 - temperature) * (1.0 - np.exp(-0.115 * relative_humidity))
    ed = 0.942 * relative_humidity ** 0.679 + \
         11.0 * np.exp((relative_humidity - 100.0) / 10.0) + common
    ew = 0.618 * relative_humidity ** 0.753 + \
         10.0 * np.exp((relative_humidity - 100.0) / 10.0) + common
    return ed, ew


def _log_rates(
    temperature: float,
    relative_humidity: float,
    wind_speed: float,
) -> tuple[float, float]:
    """Return the unscaled drying and wetting log rates (k0d, k0w)."""
    k0d = 0.424 * (1.0 - (relative_humidity / 100.0) ** 1.7) + \
          0.0694 * np.sqrt(wind_speed) * (1.0 - (relative_humidity / 100.0) ** 8)
    k0w = 0.424 * (1.0 - ((100.0 - relative_humidity) / 100.0) ** 1.7) + \
          0.0694 * np.sqrt(wind_speed) * (1.0 - ((100.0 - relative_humidity) / 100.0) ** 8)
    return k0d, k0w


def _dry_or_wet(
    moisture: float,
    temperature: float,
    relative_humidity: float,
    wind_speed: float,
    rate_scale: float,
) -> float:
    """Move moisture toward equilibrium; rate_scale is 0.581 daily, 0.0579 hourly."""
    ed, ew = _equilibrium_moisture(temperature, relative_humidity)
    k0d, k0w = _log_rates(temperature, relative_humidity, wind_speed)

    if moisture > ed:
        kd = k0d * rate_scale * np.exp(0.0365 * temperature)
        return ed + (moisture - ed) * 10.0 ** (-kd)
    if moisture < ew:
        kw = k0w * rate_scale * np.exp(0.0365 * temperature)
        return ew - (ew - moisture) * 10.0 ** (-kw)
    return moisture


def _rain_wetting(moisture: float, rain: float) -> float:
    """Apply effective rainfall (mm) to fine fuel moisture."""
    mr = moisture + 42.5 * rain * np.exp(-100.0 / (251.0 - moisture)) * \
         (1.0 - np.exp(-6.93 / rain))
    if moisture > 150.0:
        mr += 0.0015 * (moisture - 150.0) ** 2 * np.sqrt(rain)
    return min(mr, 250.0)


# =============================================================================
# Fine Fuel Moisture Code (FFMC)
# =============================================================================


def calculate_ffmc(
    temperature: float,
    relative_humidity: float,
    wind_speed: float,
    precipitation: float,
    ffmc_prev: float = 85.0,
    coefficient: float = FFMC_COEFFICIENT,
) -> float:
    """
    Calculate the daily Fine Fuel Moisture Code (FFMC).

    FFMC represents the moisture content of litter and other cured
    fine fuels on the forest floor. More rain never raises the code;
    warmer, windier and drier noon conditions never lower it.

    Parameters
    ----------
    temperature : float
        Noon temperature (degrees Celsius).
    relative_humidity : float
        Noon relative humidity (percent).
    wind_speed : float
        Noon wind speed (km/h).
    precipitation : float
        24-hour precipitation (mm).
    ffmc_prev : float
        Previous day's FFMC (default 85.0 for startup).
    coefficient : float
        Moisture conversion coefficient. ``PRECISE_FFMC_COEFFICIENT``
        selects the higher precision variant.

    Returns
    -------
    float
        Fine Fuel Moisture Code (0-101 scale).
    """
    temperature = float(temperature)
    relative_humidity = float(np.clip(float(relative_humidity), 0, 100))
    wind_speed = max(0.0, float(wind_speed))
    precipitation = max(0.0, float(precipitation))

    mo = ffmc_to_moisture(ffmc_prev, coefficient)

    # Only rain above 0.5 mm is effective
    if precipitation > 0.5:
        mo = _rain_wetting(mo, precipitation - 0.5)

    m = _dry_or_wet(mo, temperature, relative_humidity, wind_speed, 0.581)
    return moisture_to_ffmc(m, coefficient)


def calculate_hourly_ffmc(
    temperature: float,
    relative_humidity: float,
    wind_speed: float,
    precipitation: float,
    ffmc_prev: float = 85.0,
    coefficient: float = FFMC_COEFFICIENT,
) -> float:
    """
    Advance FFMC by one hour (Van Wagner 1977 hourly method).

    Parameters
    ----------
    temperature : float
        Temperature for the hour (degrees Celsius).
    relative_humidity : float
        Relative humidity for the hour (percent).
    wind_speed : float
        Wind speed for the hour (km/h).
    precipitation : float
        Precipitation that fell during the hour (mm).
    ffmc_prev : float
        FFMC at the end of the previous hour.
    coefficient : float
        Moisture conversion coefficient.

    Returns
    -------
    float
        FFMC at the end of the hour (0-101 scale).
    """
    temperature = float(temperature)
    relative_humidity = float(np.clip(float(relative_humidity), 0, 100))
    wind_speed = max(0.0, float(wind_speed))
    precipitation = max(0.0, float(precipitation))

    mo = ffmc_to_moisture(ffmc_prev, coefficient)

    if precipitation > 0.0:
        mo = _rain_wetting(mo, precipitation)

    m = _dry_or_wet(mo, temperature, relative_humidity, wind_speed, 0.0579)
    return moisture_to_ffmc(max(0.0, m), coefficient)


# =============================================================================
# Duff Moisture Code (DMC)
# =============================================================================


def calculate_dmc(
    temperature: float,
    relative_humidity: float,
    precipitation: float,
    dmc_prev: float = 6.0,
    month: int = 7,
    latitude: float = 51.0,
) -> float:
    """
    Calculate Duff Moisture Code (DMC).

    DMC represents the moisture content of loosely compacted organic
    layers of moderate depth.

    Parameters
    ----------
    temperature : float
        Noon temperature (degrees Celsius).
    relative_humidity : float
        Noon relative humidity (percent).
    precipitation : float
        24-hour precipitation (mm).
    dmc_prev : float
        Previous day's DMC (default 6.0 for startup).
    month : int
        Month of year (1-12).
    latitude : float
        Latitude in degrees (for day length adjustment).

    Returns
    -------
    float
        Duff Moisture Code.
    """
    temperature = float(temperature)
    relative_humidity = float(np.clip(float(relative_humidity), 0, 100))
    precipitation = max(0.0, float(precipitation))
    dmc_prev = max(0.0, float(dmc_prev))

    le = DMC_DAY_LENGTH.get(month, 9.0)
    if abs(latitude - 46.0) > 10:
        le = float(np.clip(le + (latitude - 46.0) * 0.1, 1.0, 20.0))

    if precipitation > 1.5:
        re = 0.92 * precipitation - 1.27
        mo = 20.0 + np.exp(5.6348 - dmc_prev / 43.43)

        if dmc_prev <= 33.0:
            b = 100.0 / (0.5 + 0.3 * dmc_prev)
        elif dmc_prev <= 65.0:
            b = 14.0 - 1.3 * np.log(dmc_prev)
        else:
            b = 6.2 * np.log(dmc_prev) - 17.2

        mr = mo + 1000.0 * re / (48.77 + b * re)
        dmc_prev = max(0.0, 244.72 - 43.43 * np.log(mr - 20.0))

    if temperature > -1.1:
        k = 1.894 * (temperature + 1.1) * (100.0 - relative_humidity) * le * 1e-6
    else:
        k = 0.0

    return float(max(0.0, dmc_prev + 100.0 * k))


# =============================================================================
# Drought Code (DC)
# =============================================================================


def calculate_dc(
    temperature: float,
    precipitation: float,
    dc_prev: float = 15.0,
    month: int = 7,
    latitude: float = 51.0,
) -> float:
    """
    Calculate Drought Code (DC).

    DC represents the moisture content of deep, compact organic layers
    and responds more slowly than DMC.

    Parameters
    ----------
    temperature : float
        Noon temperature (degrees Celsius).
    precipitation : float
        24-hour precipitation (mm).
    dc_prev : float
        Previous day's DC (default 15.0 for startup).
    month : int
        Month of year (1-12).
    latitude : float
        Latitude in degrees. South of 20N the equatorial factor of
        1.4 is used for every month.

    Returns
    -------
    float
        Drought Code.
    """
    temperature = float(temperature)
    precipitation = max(0.0, float(precipitation))
    dc_prev = max(0.0, float(dc_prev))

    if latitude < 20.0:
        fl = 1.4
    else:
        fl = DC_DAY_LENGTH.get(month, 1.4)

    if precipitation > 2.8:
        rd = 0.83 * precipitation - 1.27
        qo = 800.0 * np.exp(-dc_prev / 400.0)
        qr = qo + 3.937 * rd
        dc_prev = max(0.0, 400.0 * np.log(800.0 / qr))

    if temperature > -2.8:
        v = max(0.0, 0.36 * (temperature + 2.8) + fl)
    else:
        v = max(0.0, fl)

    return float(max(0.0, dc_prev + 0.5 * v))


# =============================================================================
# Initial Spread Index (ISI)
# =============================================================================


def calculate_isi(
    ffmc: float,
    wind_speed: float,
    coefficient: float = FFMC_COEFFICIENT,
) -> float:
    """
    Calculate Initial Spread Index (ISI).

    Parameters
    ----------
    ffmc : float
        Fine Fuel Moisture Code.
    wind_speed : float
        Wind speed (km/h).
    coefficient : float
        Moisture conversion coefficient.

    Returns
    -------
    float
        Initial Spread Index.
    """
    wind_speed = max(0.0, float(wind_speed))

    m = ffmc_to_moisture(ffmc, coefficient)
    ff = 91.9 * np.exp(-0.1386 * m) * (1.0 + m ** 5.31 / 4.93e7)
    fw = np.exp(0.05039 * wind_speed)

    return float(max(0.0, 0.208 * ff * fw))


# =============================================================================
# Buildup Index (BUI)
# =============================================================================


def calculate_bui(dmc: float, dc: float) -> float:
    """
    Calculate Buildup Index (BUI).

    BUI combines DMC and DC; when DMC is small relative to DC the
    index saturates toward the DMC value.

    Parameters
    ----------
    dmc : float
        Duff Moisture Code.
    dc : float
        Drought Code.

    Returns
    -------
    float
        Buildup Index.
    """
    dmc = max(0.0, float(dmc))
    dc = max(0.0, float(dc))

    if dmc == 0.0 and dc == 0.0:
        return 0.0

    if dmc <= 0.4 * dc:
        bui = 0.8 * dmc * dc / (dmc + 0.4 * dc)
    else:
        bui = dmc - (1.0 - 0.8 * dc / (dmc + 0.4 * dc)) * \
              (0.92 + (0.0114 * dmc) ** 1.7)

    return float(max(0.0, bui))


# =============================================================================
# Fire Weather Index (FWI)
# =============================================================================


def calculate_fwi(isi: float, bui: float) -> float:
    """
    Calculate Fire Weather Index (FWI) from ISI and BUI.
    """
    isi = max(0.0, float(isi))
    bui = max(0.0, float(bui))

    if bui <= 80.0:
        fd = 0.626 * bui ** 0.809 + 2.0
    else:
        fd = 1000.0 / (25.0 + 108.64 * np.exp(-0.023 * bui))

    b = 0.1 * isi * fd

    if b > 1.0:
        fwi = np.exp(2.72 * (0.434 * np.log(b)) ** 0.647)
    else:
        fwi = b

    return float(max(0.0, fwi))


def calculate_dsr(fwi: float) -> float:
    """Calculate Daily Severity Rating (DSR) from FWI."""
    fwi = max(0.0, float(fwi))
    return float(0.0272 * fwi ** 1.77)
