"""预订领域：实体、仓储接口与计价规则。"""
