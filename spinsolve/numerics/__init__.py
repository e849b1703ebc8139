"""数値計算パッケージ"""
