_COLS = ("daily_amount, daily_cooldown_hours, work_min_amount, work_max_amount, work_cooldown_hours, "
         "rob_success_rate, rob_cooldown_hours, rob_penalty_percent, xp_multiplier")

def get(con):
    return con.execute(f"SELECT {_COLS} FROM server_settings WHERE id=1").fetchone()
