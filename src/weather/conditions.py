"""
Condition text, weather codes and feels-like temperature.

Two derivations exist side by side:
- POWER variants key off cloud cover (POWER reports CLOUD_AMT directly).
- Generic variants key off humidity; used by GMAO and the synthetic model.
Their thresholds differ on purpose; callers rely on each one as-is.

Weather codes are two-digit strings "01".."11", increasing with severity:
    01 Clear Sky       05 Overcast      09 Heavy Rain
    02 Mostly Clear    06 Drizzle       10 Thunderstorm
    03 Partly Cloudy   07 Light Rain    11 Severe Thunderstorm
    04 Mostly Cloudy   08 Rain
"""
import math

# ---------------------------------------------------------------------------
# Feels-like
# ---------------------------------------------------------------------------


def wind_chill(temp_c: float, wind_speed_ms: float) -> float:
    """Environment Canada wind chill; wind converted from m/s to km/h."""
    v = math.pow(wind_speed_ms * 3.6, 0.16)
    return 13.12 + 0.6215 * temp_c - 11.37 * v + 0.3965 * temp_c * v


def calculate_feels_like(temp_c: float, humidity: float, wind_speed_ms: float, is_desert: bool) -> float:
    """Apparent temperature, branched by climate regime.

    Desert: dry-heat adjustment at >=30 C, wind chill at <=15 C with wind >2 m/s.
    Elsewhere: simplified heat index at >=27 C, wind chill at <=10 C with wind >1.34 m/s.
    """
    if is_desert:
        if temp_c >= 30:
            return temp_c + (temp_c - 25) * 0.1
        if temp_c <= 15 and wind_speed_ms > 2:
            return wind_chill(temp_c, wind_speed_ms)
        return temp_c

    if temp_c >= 27:
        return temp_c + 0.5 * (humidity / 100) * (temp_c - 20)
    if temp_c <= 10 and wind_speed_ms > 1.34:
        return wind_chill(temp_c, wind_speed_ms)
    return temp_c


# ---------------------------------------------------------------------------
# POWER (cloud-cover based)
# ---------------------------------------------------------------------------


def get_power_conditions(precipitation: float, cloud_cover: float, humidity: float, is_desert: bool) -> str:
    if precipitation > 12:
        return "Thunderstorm"
    if precipitation > 6:
        return "Heavy Rain"
    if precipitation > 2:
        return "Rain"
    if precipitation > 0.5:
        return "Light Rain"
    if precipitation > 0:
        return "Drizzle"

    if is_desert and humidity < 25 and cloud_cover < 20:
        return "Clear and Dry"
    if cloud_cover > 85:
        return "Overcast"
    if cloud_cover > 65:
        return "Mostly Cloudy"
    if cloud_cover > 35:
        return "Partly Cloudy"
    if cloud_cover > 15:
        return "Mostly Clear"
    return "Sunny and Dry" if is_desert else "Clear Sky"


def get_power_weather_code(precipitation: float, cloud_cover: float) -> str:
    if precipitation > 25:
        return "11"
    if precipitation > 12:
        return "10"
    if precipitation > 6:
        return "09"
    if precipitation > 2:
        return "08"
    if precipitation > 0.5:
        return "07"
    if precipitation > 0:
        return "06"
    if cloud_cover > 85:
        return "05"
    if cloud_cover > 65:
        return "04"
    if cloud_cover > 35:
        return "03"
    if cloud_cover > 15:
        return "02"
    return "01"


# ---------------------------------------------------------------------------
# Generic (humidity based)
# ---------------------------------------------------------------------------


def get_weather_conditions(precipitation: float, humidity: float, is_desert: bool) -> str:
    if precipitation > 12:
        return "Thunderstorm"
    if precipitation > 6:
        return "Heavy Rain"
    if precipitation > 2:
        return "Rain"
    if precipitation > 0:
        return "Light Rain"

    if is_desert:
        if humidity < 25:
            return "Clear and Dry"
        if humidity < 40:
            return "Sunny"
        return "Hazy"
    if humidity > 85:
        return "Overcast"
    if humidity > 70:
        return "Mostly Cloudy"
    if humidity > 55:
        return "Partly Cloudy"
    if humidity > 40:
        return "Mostly Clear"
    return "Clear Sky"


def get_weather_code(precipitation: float, humidity: float) -> str:
    if precipitation > 20:
        return "11"
    if precipitation > 10:
        return "10"
    if precipitation > 5:
        return "09"
    if precipitation > 2:
        return "08"
    if precipitation > 0.5:
        return "07"
    if precipitation > 0.1:
        return "06"
    if humidity > 85:
        return "05"
    if humidity > 75:
        return "04"
    if humidity > 60:
        return "03"
    if humidity > 45:
        return "02"
    return "01"
