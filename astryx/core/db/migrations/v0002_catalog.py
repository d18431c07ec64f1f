import json

# Starting catalog. Prices are in coins, boosts are fractions.
ITEMS = [
    # Tools: best tool only, no stacking
    {"name": "Fishing Rod", "price": 2500, "category": "tool", "rarity": "common",
     "description": "Increases work income by 10%.",
     "effect": {"type": "work_boost", "value": 0.10}},
    {"name": "Mining Pickaxe", "price": 12000, "category": "tool", "rarity": "rare",
     "description": "Increases work income by 25%.",
     "effect": {"type": "work_boost", "value": 0.25}},
    {"name": "Golden Shovel", "price": 50000, "category": "tool", "rarity": "epic",
     "description": "Increases work income by 50%.",
     "effect": {"type": "work_boost", "value": 0.50}},
    {"name": "Divine Hammer", "price": 250000, "category": "tool", "rarity": "legendary",
     "description": "Doubles work income.",
     "effect": {"type": "work_boost", "value": 1.00}},

    # Weapons: kept at home, they make you a harder target
    {"name": "Wooden Stick", "price": 1500, "category": "weapon", "rarity": "common",
     "description": "Lowers the odds of being robbed by 5%.",
     "effect": {"type": "rob_defense", "value": 0.05}},
    {"name": "Steel Dagger", "price": 7500, "category": "weapon", "rarity": "uncommon",
     "description": "Lowers the odds of being robbed by 12%.",
     "effect": {"type": "rob_defense", "value": 0.12}},
    {"name": "Enchanted Sword", "price": 25000, "category": "weapon", "rarity": "rare",
     "description": "Lowers the odds of being robbed by 20%.",
     "effect": {"type": "rob_defense", "value": 0.20}},
    {"name": "Dragon Blade", "price": 100000, "category": "weapon", "rarity": "epic",
     "description": "Lowers the odds of being robbed by 35%.",
     "effect": {"type": "rob_defense", "value": 0.35}},

    # Collectibles
    {"name": "Bronze Trophy", "price": 5000, "category": "collectible", "rarity": "common",
     "description": "A shiny bronze trophy.", "effect": {"type": "passive", "effect": "display"}},
    {"name": "Silver Trophy", "price": 15000, "category": "collectible", "rarity": "uncommon",
     "description": "A gleaming silver trophy.", "effect": {"type": "passive", "effect": "display"}},
    {"name": "Gold Trophy", "price": 50000, "category": "collectible", "rarity": "rare",
     "description": "A prestigious gold trophy.", "effect": {"type": "passive", "effect": "display"}},
    {"name": "Platinum Trophy", "price": 150000, "category": "collectible", "rarity": "epic",
     "description": "An exclusive platinum trophy.", "effect": None},
    {"name": "Diamond Trophy", "price": 1000000, "category": "collectible", "rarity": "legendary",
     "description": "The ultimate achievement.", "effect": None},

    # Consumables: one unit burnt per use
    {"name": "Energy Drink", "price": 3000, "category": "consumable", "rarity": "common",
     "description": "Takes 4 hours off your work cooldown.",
     "effect": {"type": "consumable", "effect": "cooldown_restore", "command": "work", "value": 4}},
    {"name": "Time Crystal", "price": 15000, "category": "consumable", "rarity": "rare",
     "description": "Takes 24 hours off every cooldown.",
     "effect": {"type": "consumable", "effect": "cooldown_restore", "command": "all", "value": 24}},
    {"name": "Coin Pouch", "price": 4000, "category": "consumable", "rarity": "uncommon",
     "description": "Open it for 3,000 coins.",
     "effect": {"type": "consumable", "effect": "coin_grant", "value": 3000}},
    {"name": "Treasure Chest", "price": 18000, "category": "consumable", "rarity": "rare",
     "description": "Open it for 15,000 coins.",
     "effect": {"type": "consumable", "effect": "coin_grant", "value": 15000}},
    {"name": "Wisdom Scroll", "price": 2000, "category": "consumable", "rarity": "uncommon",
     "description": "Grants 250 XP.",
     "effect": {"type": "consumable", "effect": "xp_grant", "value": 250}},
    {"name": "Ancient Tome", "price": 9000, "category": "consumable", "rarity": "epic",
     "description": "Grants 1,000 XP.",
     "effect": {"type": "consumable", "effect": "xp_grant", "value": 1000}},

    # Upgrades: permanent, stack with each other
    {"name": "Coffee Machine", "price": 20000, "category": "upgrade", "rarity": "rare",
     "description": "Work cooldown -1 hour.",
     "effect": {"type": "cooldown_reduction", "command": "work", "value": 1}},
    {"name": "Personal Assistant", "price": 60000, "category": "upgrade", "rarity": "epic",
     "description": "Work cooldown -2 hours.",
     "effect": {"type": "cooldown_reduction", "command": "work", "value": 2}},
    {"name": "Bank Vault", "price": 100000, "category": "upgrade", "rarity": "epic",
     "description": "Lowers the odds of being robbed by 50%.",
     "effect": {"type": "rob_defense", "value": 0.50}},
]

def apply(con):
    con.executemany(
        "INSERT OR IGNORE INTO items(name, description, price, category, rarity, effect_json) VALUES(?,?,?,?,?,?)",
        [
            (it["name"], it["description"], int(it["price"]), it["category"], it["rarity"],
             json.dumps(it["effect"]) if it["effect"] is not None else None)
            for it in ITEMS
        ],
    )
