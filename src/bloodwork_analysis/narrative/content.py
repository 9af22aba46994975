# ============================================================================
# src/bloodwork_analysis/narrative/content.py
# ============================================================================
"""
Bilingual (English / Urdu) text used by the rule-based summary.
"""

from ..core.context import BilingualText
from ..validators.relationships import RelationshipFlag

CRITICAL_ALERT = BilingualText(
    en=(
        "CRITICAL ALERT: {count} parameters show critical values requiring immediate medical "
        "attention. Please contact your healthcare provider immediately."
    ),
    ur=(
        "تشویشناک انتباہ: {count} پیرامیٹرز میں تشویشناک قدریں ہیں جن کے لیے فوری طبی توجہ درکار ہے۔ "
        "براہ کرم فوری طور پر اپنے صحت کی دیکھ بھال فراہم کنندہ سے رابطہ کریں۔"
    ),
)

ALL_NORMAL = BilingualText(
    en="Excellent! All your {panel} results are within normal ranges, indicating good health in this area.",
    ur="بہترین! آپ کے تمام {panel} کے نتائج معمول کی حدود میں ہیں، جو اس علاقے میں اچھی صحت کی نشاندہی کرتے ہیں۔",
)

SOME_ABNORMAL = BilingualText(
    en=(
        "Your test results show {count} parameters outside normal ranges. Review the detailed "
        "analysis below and consult your healthcare provider for guidance."
    ),
    ur=(
        "آپ کے ٹیسٹ کے نتائج {count} پیرامیٹرز کو معمول کی حدود سے باہر دکھاتے ہیں۔ "
        "نیچے تفصیلی تجزیہ دیکھیں اور رہنمائی کے لیے اپنے صحت کی دیکھ بھال فراہم کنندہ سے مشورہ کریں۔"
    ),
)

NO_RESULTS = BilingualText(
    en="No test values could be evaluated. Please check the report or enter the values manually.",
    ur="کسی بھی ٹیسٹ کی قدر کا جائزہ نہیں لیا جا سکا۔ براہ کرم رپورٹ چیک کریں یا قدریں خود درج کریں۔",
)

NOT_EVALUATED = BilingualText(
    en="{count} values could not be classified because no reference range is available.",
    ur="{count} قدروں کی درجہ بندی نہیں ہو سکی کیونکہ ان کی حوالہ حد دستیاب نہیں ہے۔",
)

DISCLAIMER = BilingualText(
    en="This is educational information, not a diagnosis.",
    ur="یہ تعلیمی معلومات ہیں، تشخیص نہیں۔",
)

PATTERN_INTERPRETATIONS = {
    RelationshipFlag.ANEMIA_PATTERN: BilingualText(
        en=(
            "Low hemoglobin suggests anemia. Your MCV value helps indicate the likely type; "
            "discuss iron, B12 and folate testing with your doctor."
        ),
        ur=(
            "ہیموگلوبن کی کمی خون کی کمی (انیمیا) کی نشاندہی کرتی ہے۔ آپ کی ایم سی وی قدر اس کی ممکنہ قسم "
            "بتانے میں مدد دیتی ہے؛ آئرن، بی 12 اور فولیٹ کے ٹیسٹ کے بارے میں اپنے ڈاکٹر سے بات کریں۔"
        ),
    ),
    RelationshipFlag.INFECTION_PATTERN: BilingualText(
        en="Raised white cells together with raised neutrophils often point to a bacterial infection or inflammation.",
        ur="سفید خلیات اور نیوٹروفلز دونوں کا بڑھنا اکثر بیکٹیریل انفیکشن یا سوزش کی طرف اشارہ کرتا ہے۔",
    ),
    RelationshipFlag.BLEEDING_RISK_PATTERN: BilingualText(
        en=(
            "Low platelets can increase the risk of bruising and bleeding. Avoid injury and "
            "blood-thinning medicines until you see your doctor."
        ),
        ur=(
            "پلیٹلیٹس کی کمی سے خراش اور خون بہنے کا خطرہ بڑھ سکتا ہے۔ ڈاکٹر سے ملنے تک چوٹ اور "
            "خون پتلا کرنے والی ادویات سے پرہیز کریں۔"
        ),
    ),
    RelationshipFlag.POLYCYTHEMIA_PATTERN: BilingualText(
        en=(
            "High hemoglobin, red cell count and hematocrit together suggest polycythemia "
            "(too many red cells). Dehydration can cause a similar picture."
        ),
        ur=(
            "ہیموگلوبن، سرخ خلیات اور ہیماٹوکرٹ کا ایک ساتھ زیادہ ہونا پولی سائتھیمیا (سرخ خلیات کی زیادتی) "
            "کی نشاندہی کرتا ہے۔ پانی کی کمی بھی ایسی ہی تصویر پیدا کر سکتی ہے۔"
        ),
    ),
    RelationshipFlag.CARDIOVASCULAR_RISK_PATTERN: BilingualText(
        en="Your lipid results point to increased cardiovascular risk and possible metabolic syndrome.",
        ur="آپ کے لپڈ نتائج دل کی بیماری کے بڑھتے خطرے اور ممکنہ میٹابولک سنڈروم کی طرف اشارہ کرتے ہیں۔",
    ),
    RelationshipFlag.DIABETES_PATTERN: BilingualText(
        en="Raised fasting glucose or HbA1c suggests prediabetes or diabetes; a follow-up test is recommended.",
        ur="خالی پیٹ شوگر یا HbA1c کا بڑھنا پری ذیابیطس یا ذیابیطس کی نشاندہی کرتا ہے؛ دوبارہ ٹیسٹ کی سفارش کی جاتی ہے۔",
    ),
    RelationshipFlag.HYPOTHYROID_PATTERN: BilingualText(
        en="A high TSH suggests an underactive thyroid (hypothyroidism).",
        ur="ٹی ایس ایچ کا زیادہ ہونا تھائرائڈ کی کم کارکردگی (ہائپوتھائرائڈزم) کی نشاندہی کرتا ہے۔",
    ),
    RelationshipFlag.HYPERTHYROID_PATTERN: BilingualText(
        en="A low TSH suggests an overactive thyroid (hyperthyroidism).",
        ur="ٹی ایس ایچ کا کم ہونا تھائرائڈ کی زیادہ کارکردگی (ہائپرتھائرائڈزم) کی نشاندہی کرتا ہے۔",
    ),
}
